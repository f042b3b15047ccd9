"""
Unit tests for AppConfig
"""

from pathlib import Path

import pytest

import prompt_library.config as config_module
from prompt_library.config import DEFAULT_SHARE_BASE_URL, AppConfig
from prompt_library.errors import ConfigError

ENV_VARS = [
    "PROMPT_LIBRARY_CONFIG",
    "PROMPT_LIBRARY_HOME",
    "PROMPT_LIBRARY_STORAGE",
    "PROMPT_LIBRARY_SHARE_URL",
    "PROMPT_LIBRARY_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_FILE", tmp_path / "missing.yaml")


def test_defaults():
    config = AppConfig.load()
    assert config.storage.type == "json"
    assert config.storage.path.endswith("library.json")
    assert config.share_base_url == DEFAULT_SHARE_BASE_URL
    assert config.log_level == "WARNING"


def test_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"data_dir: {tmp_path / 'data'}\n"
        "storage:\n  type: sqlite\n"
        "share_base_url: https://prompts.example.com/\n"
        "log_level: info\n",
        encoding="utf-8",
    )
    config = AppConfig.from_yaml(path)
    assert config.data_dir == str(tmp_path / "data")
    assert config.storage.type == "sqlite"
    assert config.storage.path == str(tmp_path / "data" / "library.db")
    assert config.share_base_url == "https://prompts.example.com/"
    assert config.log_level == "INFO"


def test_explicit_storage_path(tmp_path):
    config = AppConfig.from_dict({"storage": {"type": "json", "path": str(tmp_path / "x.json")}})
    assert config.storage.path == str(tmp_path / "x.json")


def test_presets_file_found_in_data_dir(tmp_path):
    (tmp_path / "presets.yaml").write_text("presets: {}\n", encoding="utf-8")
    config = AppConfig.from_dict({"data_dir": str(tmp_path)})
    assert config.presets_file == str(tmp_path / "presets.yaml")
    assert AppConfig.from_dict({"data_dir": str(tmp_path / "other")}).presets_file is None


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("storage:\n  type: json\nlog_level: ERROR\n", encoding="utf-8")
    monkeypatch.setenv("PROMPT_LIBRARY_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("PROMPT_LIBRARY_STORAGE", "sqlite")
    monkeypatch.setenv("PROMPT_LIBRARY_LOG_LEVEL", "debug")
    config = AppConfig.load(str(path))
    assert config.data_dir == str(tmp_path / "home")
    assert config.storage.type == "sqlite"
    assert Path(config.storage.path) == tmp_path / "home" / "library.db"
    assert config.log_level == "DEBUG"


def test_config_path_from_env(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("share_base_url: https://env.example.com/\n", encoding="utf-8")
    monkeypatch.setenv("PROMPT_LIBRARY_CONFIG", str(path))
    assert AppConfig.load().share_base_url == "https://env.example.com/"


def test_default_file_used(tmp_path, monkeypatch):
    path = tmp_path / "default.yaml"
    path.write_text("log_level: INFO\n", encoding="utf-8")
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_FILE", path)
    assert AppConfig.load().log_level == "INFO"


def test_missing_explicit_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load(str(tmp_path / "nope.yaml"))


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("storage: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        AppConfig.load(str(path))


def test_top_level_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        AppConfig.load(str(path))


def test_unknown_storage_type():
    with pytest.raises(ConfigError, match="Unknown storage type"):
        AppConfig.from_dict({"storage": {"type": "redis"}})
