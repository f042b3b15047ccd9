"""
Tests for the prompt-library CLI
"""

import pytest
from typer.testing import CliRunner

import prompt_library.config as config_module
from prompt_library.cli import app, run_playground
from prompt_library.core import EditSession, PromptStore
from prompt_library.share import encode
from prompt_library.storage import JsonFileStore

runner = CliRunner()


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point the CLI at an empty data directory."""
    for name in (
        "PROMPT_LIBRARY_CONFIG",
        "PROMPT_LIBRARY_STORAGE",
        "PROMPT_LIBRARY_SHARE_URL",
        "PROMPT_LIBRARY_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_FILE", tmp_path / "missing.yaml")
    data_dir = tmp_path / "data"
    monkeypatch.setenv("PROMPT_LIBRARY_HOME", str(data_dir))
    return data_dir


def library(home) -> PromptStore:
    return PromptStore.open(JsonFileStore(home / "library.json"))


def invoke(*args: str, **kwargs):
    return runner.invoke(app, list(args), **kwargs)


def test_new_and_list(home):
    result = invoke("new", "Greeting", "--content", "Hello {{name}}")
    assert result.exit_code == 0, result.output
    (prompt,) = library(home)
    assert prompt.name == "Greeting"
    assert prompt.variables == ["name"]

    result = invoke("list")
    assert result.exit_code == 0
    assert "Greeting" in result.output


def test_new_uses_default_template(home):
    assert invoke("new", "Default").exit_code == 0
    result = invoke("vars")
    assert result.exit_code == 0
    assert result.output.split() == ["role", "task", "additional_instructions", "context"]


def test_preset_and_preview(home):
    assert invoke("preset", "code review").exit_code == 0
    (prompt,) = library(home)
    assert prompt.name == "Code Review"

    result = invoke("preview", prompt.id, "--var", "diff=+ added line", "--raw")
    assert result.exit_code == 0
    assert "Code diff:\n+ added line\n" in result.output


def test_preview_keeps_unfilled_placeholders(home):
    invoke("new", "Ship", "--content", "Hi {{name}}, your {{item}} shipped.")
    result = invoke("preview", "--var", "name=Ana", "--var", "item=", "--raw")
    assert result.exit_code == 0
    assert "Hi Ana, your {{item}} shipped." in result.output


def test_unknown_preset(home):
    result = invoke("preset", "Nope")
    assert result.exit_code == 1


def test_edit_history_and_restore(home):
    invoke("new", "X", "--content", "first {{a}}")
    (prompt,) = library(home)

    result = invoke("edit", prompt.id, "--content", "new body {{v}}")
    assert result.exit_code == 0, result.output
    (prompt,) = library(home)
    assert len(prompt.versions) == 2
    assert prompt.versions[1].content == "new body {{v}}"
    assert prompt.variables == ["v"]

    result = invoke("restore", prompt.id, "0")
    assert result.exit_code == 0
    assert "first {{a}}" in result.output
    assert len(library(home).get(prompt.id).versions) == 2

    result = invoke("restore", prompt.id, "0", "--commit")
    assert result.exit_code == 0
    restored = library(home).get(prompt.id)
    assert [v.content for v in restored.versions] == [
        "first {{a}}",
        "new body {{v}}",
        "first {{a}}",
    ]

    result = invoke("history", prompt.id)
    assert result.exit_code == 0


def test_edit_without_changes(home):
    invoke("new", "X", "--content", "same")
    result = invoke("edit", "--content", "same")
    assert result.exit_code == 0
    assert "nothing committed" in result.output
    (prompt,) = library(home)
    assert len(prompt.versions) == 1


def test_restore_bad_version(home):
    invoke("new", "X", "--content", "x")
    (prompt,) = library(home)
    result = invoke("restore", prompt.id, "3")
    assert result.exit_code == 1


def test_rename(home):
    invoke("new", "Old", "--content", "x")
    (prompt,) = library(home)
    assert invoke("rename", prompt.id, "New").exit_code == 0
    renamed = library(home).get(prompt.id)
    assert renamed.name == "New"
    assert len(renamed.versions) == 2


def test_delete(home):
    invoke("new", "A", "--content", "a")
    invoke("new", "B", "--content", "b")
    first, second = library(home)
    result = invoke("delete", first.id, "--yes")
    assert result.exit_code == 0
    assert [p.id for p in library(home)] == [second.id]


def test_delete_needs_confirmation(home):
    invoke("new", "A", "--content", "a")
    (prompt,) = library(home)
    result = invoke("delete", prompt.id, input="n\n")
    assert result.exit_code != 0
    assert len(library(home)) == 1


def test_share_and_import(home):
    invoke("new", "Mail", "--content", "Dear {{name}} ✉")
    result = invoke("share", "--token")
    assert result.exit_code == 0
    token = result.output.strip().splitlines()[0]

    result = invoke("import-shared", f"https://prompts.example.com/?s={token}")
    assert result.exit_code == 0, result.output
    names = [p.name for p in library(home)]
    assert names == ["Mail", "Mail (shared)"]
    assert library(home).prompts()[1].content == "Dear {{name}} ✉"


def test_share_link_uses_base_url(home, monkeypatch):
    monkeypatch.setenv("PROMPT_LIBRARY_SHARE_URL", "https://prompts.example.com/app")
    invoke("new", "Mail", "--content", "Dear {{name}}")
    result = invoke("share")
    assert result.exit_code == 0
    assert result.output.startswith("https://prompts.example.com/app?s=")


def test_import_bare_token(home):
    result = invoke("import-shared", encode("T", "body", []))
    assert result.exit_code == 0
    assert [p.name for p in library(home)] == ["T (shared)"]


def test_import_malformed_token(home):
    result = invoke("import-shared", "not-valid-base64!!")
    assert result.exit_code == 1
    assert len(library(home)) == 0


def test_import_link_without_param(home):
    result = invoke("import-shared", "https://prompts.example.com/?x=1")
    assert result.exit_code == 1


def test_export_and_import_file(home, tmp_path):
    invoke("new", "Code Review!", "--content", "Review {{diff}}")
    out_dir = tmp_path / "exports"
    result = invoke("export", "--output-dir", str(out_dir))
    assert result.exit_code == 0
    path = out_dir / "code-review-.md"
    assert path.exists()
    assert path.read_text(encoding="utf-8").startswith("# Code Review!\n\nReview {{diff}}\n\n---\n")

    result = invoke("import", str(path), "--name", "Copy")
    assert result.exit_code == 0
    copy = library(home).prompts()[-1]
    assert copy.name == "Copy"
    assert copy.content == "Review {{diff}}"


def test_empty_library_errors(home):
    result = invoke("show")
    assert result.exit_code == 1


def test_bad_var_option(home):
    invoke("new", "X", "--content", "{{a}}")
    result = invoke("preview", "--var", "no-equals")
    assert result.exit_code == 1


def test_sqlite_backend(home, monkeypatch):
    monkeypatch.setenv("PROMPT_LIBRARY_STORAGE", "sqlite")
    assert invoke("new", "Stored", "--content", "x").exit_code == 0
    assert (home / "library.db").exists()
    result = invoke("list")
    assert "Stored" in result.output


def test_run_playground():
    session = EditSession(content="{{greeting}}, {{name}}! {{greeting}}")
    session.set_content(session.content)
    answers = {"greeting": "Hello", "name": ""}
    asked = []

    def ask(name, current):
        asked.append((name, current))
        return answers[name]

    assert run_playground(session, ask) == "Hello, {{name}}! Hello"
    assert asked == [("greeting", ""), ("name", "")]
