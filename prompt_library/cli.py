"""CLI entry point for prompt-library."""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Annotated, Callable, Iterator, Optional

import typer
from dotenv import load_dotenv

# Load .env before anything else so env vars are available for defaults
load_dotenv()
from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import FileHistory
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .clipboard import copy_to_clipboard
from .config import AppConfig
from .core import EditSession, Prompt, PromptStore
from .errors import PromptLibraryError
from .export import render_export, write_export
from .presets import all_presets, find_preset
from .share import SHARE_PARAM, build_share_url, encode, extract_share_token
from .storage import create_store
from .templates import extract_variables, load_prompt_file, parse_vars

# Rich consoles: results on stdout, diagnostics on stderr
console = Console()
err_console = Console(stderr=True)

# Typer app
app = typer.Typer(
    name="prompt-library",
    help="Author, version, test-render and share {{variable}} prompt templates.",
    add_completion=False,
    no_args_is_help=True,
)

PLAYGROUND_HISTORY = "playground_history"


@dataclass
class CliState:
    """Per-invocation state shared by commands."""

    config: AppConfig
    _store: PromptStore | None = None

    @property
    def store(self) -> PromptStore:
        if self._store is None:
            self._store = PromptStore.open(create_store(self.config.storage))
        return self._store


def configure_logging(level: str) -> None:
    """Route library logging through Rich on stderr."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def format_ms(timestamp: int) -> str:
    """Format epoch milliseconds as local time."""
    return datetime.fromtimestamp(timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")


def first_line(text: str, width: int = 60) -> str:
    line = text.strip().split("\n", 1)[0] if text.strip() else ""
    if len(line) > width:
        line = line[: width - 3] + "..."
    return line


@contextmanager
def cli_errors() -> Iterator[None]:
    """Print expected failures in red and exit with status 1."""
    try:
        yield
    except (PromptLibraryError, FileNotFoundError, ValueError) as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc


def get_state(ctx: typer.Context) -> CliState:
    state: CliState = ctx.obj
    return state


def resolve_prompt(state: CliState, ref: str | None) -> Prompt:
    """Find a prompt by id or id prefix, defaulting to the active selection."""
    store = state.store
    if ref:
        prompt = store.resolve(ref)
        store.select(prompt.id)
        return prompt
    prompt = store.selected
    if prompt is None:
        raise PromptLibraryError("Library is empty. Create a prompt with 'new' or 'preset'.")
    return prompt


def print_prompt(prompt: Prompt) -> None:
    variables = ", ".join(prompt.variables) or "(none)"
    console.print(
        Panel(
            escape(prompt.content),
            title=f"[bold]{escape(prompt.name)}[/bold] [dim]{prompt.id}[/dim]",
            subtitle=f"variables: {escape(variables)} | v{prompt.current_version}",
            border_style="blue",
        )
    )


def read_content(content: str | None, file: str | None) -> str | None:
    if content is not None and file is not None:
        raise ValueError("Use either --content or --file, not both")
    if file is not None:
        return Path(file).expanduser().read_text(encoding="utf-8")
    return content


PromptRef = Annotated[
    Optional[str],
    typer.Argument(help="Prompt id or unique id prefix (defaults to the active prompt)"),
]


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Optional[str],
        typer.Option("--config", "-c", help="Path to config YAML"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """prompt-library: a local library of versioned prompt templates."""
    try:
        app_config = AppConfig.load(config)
    except (PromptLibraryError, FileNotFoundError) as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc
    configure_logging("DEBUG" if verbose else app_config.log_level)
    ctx.obj = CliState(config=app_config)


@app.command()
def new(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Display name")],
    content: Annotated[
        Optional[str], typer.Option("--content", help="Template text")
    ] = None,
    file: Annotated[
        Optional[str], typer.Option("--file", "-f", help="Read template text from a file")
    ] = None,
) -> None:
    """Create a prompt (from the default template unless content is given)."""
    state = get_state(ctx)
    with cli_errors():
        prompt = state.store.create(name, read_content(content, file))
    console.print(f"[green]Created prompt[/green] {prompt.id}")
    print_prompt(prompt)


@app.command()
def presets(ctx: typer.Context) -> None:
    """List built-in and user presets."""
    state = get_state(ctx)
    with cli_errors():
        available = all_presets(state.config.presets_file)
    table = Table(title="Presets")
    table.add_column("Name", style="cyan")
    table.add_column("Variables")
    table.add_column("Source", style="dim")
    for preset in available:
        table.add_row(
            escape(preset.name),
            escape(", ".join(extract_variables(preset.content))),
            "built-in" if preset.builtin else "user",
        )
    console.print(table)


@app.command()
def preset(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Preset name (case-insensitive)")],
) -> None:
    """Create a prompt from a preset."""
    state = get_state(ctx)
    with cli_errors():
        found = find_preset(name, state.config.presets_file)
        if found is None:
            raise PromptLibraryError(f"Preset not found: {name}")
        prompt = state.store.load_preset(found.name, found.content)
    console.print(f"[green]Created prompt[/green] {prompt.id} from preset '{escape(found.name)}'")
    print_prompt(prompt)


@app.command("list")
def list_prompts(ctx: typer.Context) -> None:
    """List prompts in library order."""
    state = get_state(ctx)
    store = state.store
    if not len(store):
        console.print("[yellow]No prompts yet.[/yellow]")
        return
    table = Table(title=f"Prompts ({state.config.storage.path})")
    table.add_column("Id", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Variables")
    table.add_column("Versions", justify="right")
    table.add_column("Updated")
    for prompt in store:
        table.add_row(
            prompt.id,
            escape(prompt.name),
            escape(", ".join(prompt.variables)),
            str(len(prompt.versions)),
            format_ms(prompt.updated_at),
        )
    console.print(table)


@app.command()
def show(ctx: typer.Context, prompt_ref: PromptRef = None) -> None:
    """Show a prompt's current content."""
    state = get_state(ctx)
    with cli_errors():
        prompt = resolve_prompt(state, prompt_ref)
    print_prompt(prompt)


@app.command("vars")
def show_vars(ctx: typer.Context, prompt_ref: PromptRef = None) -> None:
    """Print a prompt's variables, one per line."""
    state = get_state(ctx)
    with cli_errors():
        prompt = resolve_prompt(state, prompt_ref)
    for name in prompt.variables:
        console.print(name, markup=False, highlight=False, emoji=False)


@app.command()
def edit(
    ctx: typer.Context,
    prompt_ref: PromptRef = None,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="New name")] = None,
    content: Annotated[
        Optional[str], typer.Option("--content", help="New template text")
    ] = None,
    file: Annotated[
        Optional[str], typer.Option("--file", "-f", help="Read new template text from a file")
    ] = None,
) -> None:
    """Commit a new version. Opens $EDITOR when no content is given."""
    state = get_state(ctx)
    with cli_errors():
        prompt = resolve_prompt(state, prompt_ref)
        session = EditSession.for_prompt(prompt)
        new_content = read_content(content, file)
        if new_content is None and name is None:
            new_content = typer.edit(prompt.content, extension=".md")
            if new_content is None:
                console.print(
                    "[yellow]Editor closed without saving; nothing committed.[/yellow]"
                )
                return
        if new_content is not None:
            session.set_content(new_content)
        if name is not None:
            session.name = name
        if not session.is_dirty(prompt):
            console.print("[yellow]No changes; nothing committed.[/yellow]")
            return
        updated = session.commit(state.store)
    console.print(f"[green]Committed version {updated.current_version}[/green]")
    print_prompt(updated)


@app.command()
def rename(
    ctx: typer.Context,
    prompt_ref: Annotated[str, typer.Argument(help="Prompt id or unique id prefix")],
    new_name: Annotated[str, typer.Argument(help="New display name")],
) -> None:
    """Rename a prompt (recorded as a new version)."""
    state = get_state(ctx)
    with cli_errors():
        prompt = resolve_prompt(state, prompt_ref)
        updated = state.store.commit_edit(prompt.id, new_name, prompt.content)
    console.print(f"[green]Renamed to '{escape(updated.name)}'[/green]")


@app.command()
def delete(
    ctx: typer.Context,
    prompt_ref: Annotated[str, typer.Argument(help="Prompt id or unique id prefix")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
) -> None:
    """Delete a prompt and its history."""
    state = get_state(ctx)
    with cli_errors():
        prompt = resolve_prompt(state, prompt_ref)
    if not yes and not typer.confirm(f"Delete '{prompt.name}' ({prompt.id})?"):
        raise typer.Abort()
    state.store.delete(prompt.id)
    console.print(f"[green]Deleted[/green] {prompt.id}")
    selected = state.store.selected
    if selected is not None:
        console.print(f"[dim]Active prompt: {escape(selected.name)} ({selected.id})[/dim]")


@app.command()
def history(ctx: typer.Context, prompt_ref: PromptRef = None) -> None:
    """List a prompt's versions, oldest first."""
    state = get_state(ctx)
    with cli_errors():
        prompt = resolve_prompt(state, prompt_ref)
    table = Table(title=f"History of {escape(prompt.name)}")
    table.add_column("#", justify="right")
    table.add_column("Saved")
    table.add_column("Variables")
    table.add_column("First line", style="dim")
    for index, version in enumerate(prompt.versions):
        marker = " *" if index == prompt.current_version else ""
        table.add_row(
            f"{index}{marker}",
            format_ms(version.timestamp),
            escape(", ".join(extract_variables(version.content))),
            escape(first_line(version.content)),
        )
    console.print(table)


@app.command()
def restore(
    ctx: typer.Context,
    prompt_ref: Annotated[str, typer.Argument(help="Prompt id or unique id prefix")],
    version: Annotated[int, typer.Argument(help="Version index from 'history'")],
    commit: Annotated[
        bool, typer.Option("--commit", help="Commit the old content as a new version")
    ] = False,
) -> None:
    """Show a past version; with --commit, make it current again."""
    state = get_state(ctx)
    with cli_errors():
        prompt = resolve_prompt(state, prompt_ref)
        session = EditSession.for_prompt(prompt)
        content = session.restore_version(state.store, prompt.id, version)
        if not commit:
            console.print(
                Panel(
                    escape(content),
                    title=f"{escape(prompt.name)} v{version}",
                    border_style="yellow",
                )
            )
            return
        if not session.is_dirty(prompt):
            console.print(
                "[yellow]Version matches the current content; nothing committed.[/yellow]"
            )
            return
        updated = session.commit(state.store)
    console.print(
        f"[green]Restored v{version} as version {updated.current_version}[/green]"
    )


@app.command()
def preview(
    ctx: typer.Context,
    prompt_ref: PromptRef = None,
    var: Annotated[
        Optional[list[str]],
        typer.Option("--var", help="Test input as key=value (repeatable)"),
    ] = None,
    version: Annotated[
        Optional[int], typer.Option("--version", help="Render a past version instead")
    ] = None,
    raw: Annotated[bool, typer.Option("--raw", help="Print only the rendered text")] = False,
) -> None:
    """Render a prompt with test inputs. Unfilled placeholders stay visible."""
    state = get_state(ctx)
    with cli_errors():
        prompt = resolve_prompt(state, prompt_ref)
        session = EditSession.for_prompt(prompt)
        if version is not None:
            session.restore_version(state.store, prompt.id, version)
        for key, value in parse_vars(var or []).items():
            session.set_value(key, value)
    rendered = session.preview()
    if raw:
        console.print(rendered, markup=False, highlight=False, emoji=False, soft_wrap=True)
        return
    console.print(Panel(escape(rendered), title="Preview", border_style="green"))
    missing = session.missing()
    if missing:
        err_console.print(f"[yellow]Unfilled: {escape(', '.join(missing))}[/yellow]")


def run_playground(session: EditSession, ask: Callable[[str, str], str]) -> str:
    """Ask for every variable in turn and return the rendered preview.

    Args:
        session: Editing session holding the template
        ask: Called with (variable_name, current_value), returns the new value
    """
    for name in session.variables:
        session.set_value(name, ask(name, session.test_values.get(name, "")))
    return session.preview()


@app.command()
def playground(ctx: typer.Context, prompt_ref: PromptRef = None) -> None:
    """Fill in test inputs interactively and render, repeatedly."""
    state = get_state(ctx)
    with cli_errors():
        prompt = resolve_prompt(state, prompt_ref)
    session = EditSession.for_prompt(prompt)

    history_dir = Path(state.config.data_dir)
    history_dir.mkdir(parents=True, exist_ok=True)
    prompt_session: PromptSession[str] = PromptSession(
        history=FileHistory(str(history_dir / PLAYGROUND_HISTORY))
    )

    def ask(name: str, current: str) -> str:
        return prompt_session.prompt(
            HTML(f"<ansicyan><b>{name}</b></ansicyan> = "), default=current
        )

    console.print(
        Panel(
            f"[bold]{escape(prompt.name)}[/bold]\n"
            f"Variables: {escape(', '.join(session.variables) or '(none)')}\n"
            "Leave a value empty to keep its placeholder. Ctrl-D to quit.",
            border_style="green",
        )
    )
    while True:
        try:
            rendered = run_playground(session, ask)
        except (EOFError, KeyboardInterrupt):
            console.print("\n[dim]Goodbye![/dim]")
            break
        console.print(Panel(escape(rendered), title="Preview", border_style="green"))
        if not session.variables or not typer.confirm("Render again?", default=True):
            break


@app.command()
def export(
    ctx: typer.Context,
    prompt_ref: PromptRef = None,
    output_dir: Annotated[
        str, typer.Option("--output-dir", "-o", help="Directory to write the file into")
    ] = ".",
    stdout: Annotated[bool, typer.Option("--stdout", help="Print instead of writing")] = False,
) -> None:
    """Export a prompt as a markdown document."""
    state = get_state(ctx)
    with cli_errors():
        prompt = resolve_prompt(state, prompt_ref)
    if stdout:
        console.print(
            render_export(prompt), markup=False, highlight=False, emoji=False, soft_wrap=True
        )
        return
    path = write_export(prompt, output_dir)
    console.print(f"[green]Exported to[/green] {escape(str(path))}")


@app.command()
def share(
    ctx: typer.Context,
    prompt_ref: PromptRef = None,
    copy: Annotated[bool, typer.Option("--copy", help="Copy the link to the clipboard")] = False,
    token_only: Annotated[
        bool, typer.Option("--token", help="Print only the share token")
    ] = False,
) -> None:
    """Print a share link for a prompt."""
    state = get_state(ctx)
    with cli_errors():
        prompt = resolve_prompt(state, prompt_ref)
    token = encode(prompt.name, prompt.content, prompt.variables)
    text = token if token_only else build_share_url(state.config.share_base_url, token)
    console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)
    if copy:
        if copy_to_clipboard(text):
            err_console.print("[green]Copied to clipboard[/green]")
        else:
            err_console.print("[yellow]Could not copy to clipboard[/yellow]")


@app.command("import-shared")
def import_shared(
    ctx: typer.Context,
    link: Annotated[str, typer.Argument(help="Share link or bare share token")],
) -> None:
    """Add a shared prompt to the library as '<name> (shared)'."""
    state = get_state(ctx)
    token = link
    if "://" in link or f"{SHARE_PARAM}=" in link:
        token, _ = extract_share_token(link)
        if token is None:
            err_console.print(f"[red]No '{SHARE_PARAM}' parameter in link[/red]")
            raise typer.Exit(1)
    prompt = state.store.import_shared(token)
    if prompt is None:
        err_console.print("[red]Share link is malformed; nothing imported[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Imported[/green] {prompt.id}")
    print_prompt(prompt)


@app.command("import")
def import_file(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Markdown file (frontmatter or exported format)")],
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Override the name")] = None,
) -> None:
    """Create a prompt from a markdown file."""
    state = get_state(ctx)
    with cli_errors():
        loaded = load_prompt_file(path)
        prompt = state.store.create(name or loaded.name, loaded.content)
    console.print(f"[green]Imported[/green] {prompt.id}")
    print_prompt(prompt)


if __name__ == "__main__":
    app()
