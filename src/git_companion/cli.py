"""Command line entry points."""

from collections.abc import Callable
from pathlib import Path

import typer
from rich.panel import Panel
from rich.table import Table

from .config import ConfigPaths, ConfigSource, InstanceType
from .console import configure_logging, console
from .editor import ConsolePrompter, SettingsEditor, SettingsSession
from .errors import GitCompanionError, RepositoryError
from .modes import attach, detach
from .paths import require_repo
from .runner import run_commands, split_commands

app = typer.Typer(
    name="git-companion",
    help="Attach a companion repository to a host, edit its workflow settings and replay stored git commands.",
    add_completion=False,
    no_args_is_help=True,
)


def _fail(error: GitCompanionError) -> typer.Exit:
    if isinstance(error, RepositoryError):
        for message in error.messages:
            console.print(f"[red]ERROR:[/red] {message}")
    else:
        console.print(f"[red]ERROR:[/red] {error}")
    return typer.Exit(code=1)


def _guarded(action: Callable[[ConfigPaths], None]) -> None:
    configure_logging()
    paths = ConfigPaths(Path.cwd())
    try:
        action(paths)
    except GitCompanionError as e:
        raise _fail(e) from e


def _open_session(paths: ConfigPaths) -> SettingsSession:
    instance = paths.load_instance()
    source = ConfigSource.for_instance_type(instance.instance_type)
    return SettingsSession.open(paths, source, instance=instance)


def attach_command():
    """Attach to the host repository and make it the working repository."""

    def action(paths: ConfigPaths) -> None:
        working = attach(paths)
        console.print(
            Panel(
                f"[green]✓[/green] Working repository: [bold]{working.repo_root}[/bold]\n"
                f"Repository type: {working.repo_type.value}\n"
                f"Push commands: {working.repo_push or '[dim]none[/dim]'}",
                title="Attached",
                border_style="green",
            )
        )

    _guarded(action)


def detach_command():
    """Run standalone against the instance repository."""

    def action(paths: ConfigPaths) -> None:
        working = detach(paths)
        console.print(
            Panel(
                f"[green]✓[/green] Working repository: [bold]{working.repo_root}[/bold]\n"
                f"Repository type: {working.repo_type.value}\n"
                f"Push commands: {working.repo_push or '[dim]none[/dim]'}",
                title="Detached",
                border_style="green",
            )
        )

    _guarded(action)


def edit_settings_command():
    """Interactively edit the workflow settings."""

    def action(paths: ConfigPaths) -> None:
        session = _open_session(paths)
        try:
            SettingsEditor(session, ConsolePrompter()).run()
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted[/yellow]")
            raise typer.Exit(code=130)

    _guarded(action)


def push_command():
    """Run the stored push commands in the working repository."""

    def action(paths: ConfigPaths) -> None:
        working = paths.load_working()
        if not split_commands(working.repo_push):
            console.print("[yellow]No push commands configured[/yellow]")
            return
        root = require_repo(working.repo_root, "working repository")
        run_commands(root, working.repo_push)

    _guarded(action)


def init_command():
    """Run the stored init commands in the working repository."""

    def action(paths: ConfigPaths) -> None:
        session = _open_session(paths)
        commands = session.settings.init_commands
        if not split_commands(commands):
            console.print("[yellow]No init commands configured[/yellow]")
            return
        run_commands(session.repo_root, commands)

    _guarded(action)


def status_command():
    """Show the current mode and settings."""

    def action(paths: ConfigPaths) -> None:
        session = _open_session(paths)
        settings = session.settings
        mode = "attached" if session.instance.instance_type is InstanceType.COMPANION else "detached"

        table = Table(show_header=False)
        table.add_column("Key", style="bold")
        table.add_column("Value")
        table.add_row("Mode", mode)
        table.add_row("Settings source", session.source.value)
        table.add_row("Working repository", str(session.repo_root))
        table.add_row("Repository type", settings.repo_type.value)
        table.add_row("Push commands", settings.push_commands or "-")
        table.add_row("Init commands", settings.init_commands or "-")
        table.add_row("Notebook source", settings.notebooks.source_path or "-")
        table.add_row("Notebook destination", settings.notebooks.destination_path or "-")
        console.print(table)

    _guarded(action)


app.command(name="attach")(attach_command)
app.command(name="detach")(detach_command)
app.command(name="edit-settings")(edit_settings_command)
app.command(name="push")(push_command)
app.command(name="init")(init_command)
app.command(name="status")(status_command)


def main():
    """Entry point for the umbrella command."""
    app()


def attach_main():
    typer.run(attach_command)


def detach_main():
    typer.run(detach_command)


def edit_settings_main():
    typer.run(edit_settings_command)


if __name__ == "__main__":
    main()
