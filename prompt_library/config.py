"""Configuration for the prompt library."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

# Default paths
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "prompt-library"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "prompt-library"
DEFAULT_SHARE_BASE_URL = "https://prompt-library.local/"

STORAGE_TYPES = ("json", "sqlite", "memory")
STORAGE_FILENAMES = {"json": "library.json", "sqlite": "library.db", "memory": ""}


@dataclass
class StorageConfig:
    """Persistence backend configuration."""

    type: str = "json"  # "json", "sqlite" or "memory"
    path: str = str(DEFAULT_DATA_DIR / "library.json")

    def __post_init__(self) -> None:
        if self.type not in STORAGE_TYPES:
            raise ConfigError(
                f"Unknown storage type '{self.type}' (expected one of {', '.join(STORAGE_TYPES)})"
            )


@dataclass
class AppConfig:
    """Main application configuration."""

    data_dir: str = str(DEFAULT_DATA_DIR)
    storage: StorageConfig = field(default_factory=StorageConfig)
    presets_file: str | None = None
    share_base_url: str = DEFAULT_SHARE_BASE_URL
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppConfig":
        """Create config from dictionary (e.g., parsed YAML)."""
        if not isinstance(data, dict):
            raise ConfigError("Config must be a YAML mapping at the top level")

        data_dir = str(Path(data.get("data_dir", DEFAULT_DATA_DIR)).expanduser())

        storage_data = data.get("storage") or {}
        if not isinstance(storage_data, dict):
            raise ConfigError("storage must be a mapping")
        storage_type = storage_data.get("type", "json")
        default_path = Path(data_dir) / STORAGE_FILENAMES.get(storage_type, "library")
        storage = StorageConfig(
            type=storage_type,
            path=str(Path(storage_data.get("path", default_path)).expanduser()),
        )

        presets_file = data.get("presets_file")
        if presets_file is None:
            # Look for presets next to the data directory by default
            candidate = Path(data_dir) / "presets.yaml"
            presets_file = str(candidate) if candidate.exists() else None
        else:
            presets_file = str(Path(presets_file).expanduser())

        return cls(
            data_dir=data_dir,
            storage=storage,
            presets_file=presets_file,
            share_base_url=data.get("share_base_url", DEFAULT_SHARE_BASE_URL),
            log_level=str(data.get("log_level", "WARNING")).upper(),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AppConfig":
        """Load config from YAML file."""
        path = Path(path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

        return cls.from_dict(data or {})

    @classmethod
    def load(cls, config_path: str | None = None) -> "AppConfig":
        """Load config with precedence: explicit path > env vars > default file > defaults.

        Args:
            config_path: Explicit path to config file (highest precedence).

        Returns:
            Loaded config with environment overrides applied.
        """
        config_path = config_path or os.getenv("PROMPT_LIBRARY_CONFIG")
        if config_path:
            data = _read_yaml(Path(config_path).expanduser(), required=True)
        else:
            data = _read_yaml(DEFAULT_CONFIG_FILE, required=False)

        # Environment overrides the file
        if os.getenv("PROMPT_LIBRARY_HOME"):
            data["data_dir"] = os.environ["PROMPT_LIBRARY_HOME"]
        if os.getenv("PROMPT_LIBRARY_STORAGE"):
            storage = dict(data.get("storage") or {})
            storage["type"] = os.environ["PROMPT_LIBRARY_STORAGE"]
            data["storage"] = storage
        if os.getenv("PROMPT_LIBRARY_SHARE_URL"):
            data["share_base_url"] = os.environ["PROMPT_LIBRARY_SHARE_URL"]
        if os.getenv("PROMPT_LIBRARY_LOG_LEVEL"):
            data["log_level"] = os.environ["PROMPT_LIBRARY_LOG_LEVEL"]

        return cls.from_dict(data)


def _read_yaml(path: Path, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise FileNotFoundError(f"Config file not found: {path}")
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config must be a YAML mapping at the top level")
    return data
