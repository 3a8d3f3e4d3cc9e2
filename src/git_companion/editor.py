"""
Interactive settings editor.

The editor is a small state machine: a menu state, one state per editable
setting, and a terminal quit state. Each edit state prompts, validates,
persists and hands back the next state. Prompts go through a `Prompter`
so the whole flow can be driven by canned responses.

Durable settings live in exactly one document, chosen by `ConfigSource`.
The working config is recomputed from it on every save, so the two can
never drift apart.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Protocol

from rich.prompt import Confirm, Prompt
from rich.table import Table

from .config import (
    ConfigPaths,
    ConfigSource,
    HostConfig,
    InstanceConfig,
    NotebookPaths,
    RepoSettings,
    RepoType,
    WorkingConfig,
)
from .console import console
from .errors import ConfigParseError, ConfigWriteError, SubcommandFailure
from .paths import require_repo, resolve_path
from .runner import run_commands

logger = logging.getLogger(__name__)


class Prompter(Protocol):
    """Source of operator input. A blank answer means "no change"."""

    def ask(self, message: str) -> str: ...

    def choose(self, message: str, choices: list[str]) -> str: ...

    def confirm(self, message: str) -> bool: ...


class ConsolePrompter:
    """Prompter reading from the terminal through rich."""

    def ask(self, message: str) -> str:
        return Prompt.ask(message, default="", show_default=False, console=console).strip()

    def choose(self, message: str, choices: list[str]) -> str:
        return Prompt.ask(
            message, choices=choices, default="", show_default=False, console=console
        ).strip()

    def confirm(self, message: str) -> bool:
        return Confirm.ask(message, default=False, console=console)


@dataclass
class SettingsSession:
    """
    The settings being edited and where they are persisted.

    `source` decides which document is authoritative: the instance config
    when standalone, the host config when attached.
    """

    paths: ConfigPaths
    source: ConfigSource
    instance: InstanceConfig
    host: HostConfig | None
    repo_root: Path

    @classmethod
    def open(
        cls,
        paths: ConfigPaths,
        source: ConfigSource,
        instance: InstanceConfig | None = None,
    ) -> "SettingsSession":
        """
        Load the documents for `source`.

        Raises:
            ConfigError: If a document is missing or malformed.
            RepositoryError: If the active root is not a git repository.
        """
        instance = instance or paths.load_instance()

        if source is ConfigSource.INSTANCE:
            root = require_repo(instance.instance_root(paths.config_dir), "instance repository")
            return cls(paths=paths, source=source, instance=instance, host=None, repo_root=root)

        host_root = instance.host_root(paths.config_dir)
        if host_root is None:
            raise ConfigParseError(paths.instance_file, "missing field 'hostRepoRoot'")
        root = require_repo(host_root, "host repository")
        host = paths.load_host(root)
        return cls(paths=paths, source=source, instance=instance, host=host, repo_root=root)

    @property
    def settings(self) -> RepoSettings:
        if self.source is ConfigSource.HOST:
            return self.host.settings
        return self.instance.settings

    def working(self) -> WorkingConfig:
        return WorkingConfig.project(self.settings, self.repo_root)

    def commit(self, settings: RepoSettings) -> None:
        """
        Persist `settings`, then the working config derived from them.

        In-memory state only changes once both files are written. A file
        already written before a failure stays written.

        Raises:
            ConfigWriteError: If either document cannot be written.
        """
        working = WorkingConfig.project(settings, self.repo_root)

        if self.source is ConfigSource.HOST:
            host = replace(self.host, settings=settings)
            self.paths.save_host(self.repo_root, host)
            self.paths.save_working(working)
            self.host = host
        else:
            instance = replace(self.instance, settings=settings)
            self.paths.save_instance(instance)
            self.paths.save_working(working)
            self.instance = instance
        logger.debug("Saved settings to the %s config", self.source.value)


class EditorState(Enum):
    MENU = "menu"
    REPO_TYPE = "repo_type"
    PUSH_COMMANDS = "push_commands"
    NOTEBOOK_PATHS = "notebook_paths"
    INIT_COMMANDS = "init_commands"
    QUIT = "quit"


MENU_OPTIONS: list[tuple[str, EditorState, str]] = [
    ("1", EditorState.REPO_TYPE, "Repository type"),
    ("2", EditorState.PUSH_COMMANDS, "Push commands"),
    ("3", EditorState.NOTEBOOK_PATHS, "Notebook paths"),
    ("4", EditorState.INIT_COMMANDS, "Init commands"),
    ("5", EditorState.QUIT, "Quit"),
]


class SettingsEditor:
    """Menu driven editor over a `SettingsSession`."""

    def __init__(
        self,
        session: SettingsSession,
        prompter: Prompter,
        runner: Callable[[Path, str], list[str]] = run_commands,
    ):
        self.session = session
        self.prompter = prompter
        self.runner = runner
        self._handlers: dict[EditorState, Callable[[], EditorState]] = {
            EditorState.MENU: self.menu,
            EditorState.REPO_TYPE: self.edit_repo_type,
            EditorState.PUSH_COMMANDS: self.edit_push_commands,
            EditorState.NOTEBOOK_PATHS: self.edit_notebook_paths,
            EditorState.INIT_COMMANDS: self.edit_init_commands,
        }

    def run(self, state: EditorState = EditorState.MENU) -> None:
        while state is not EditorState.QUIT:
            state = self._handlers[state]()

    def _render_settings(self) -> Table:
        settings = self.session.settings
        table = Table(title=f"Settings ({self.session.source.value} config)", show_header=False)
        table.add_column("Setting", style="bold")
        table.add_column("Value")
        table.add_row("Repository root", str(self.session.repo_root))
        table.add_row("Repository type", settings.repo_type.value)
        table.add_row("Push commands", settings.push_commands or "[dim]none[/dim]")
        table.add_row("Init commands", settings.init_commands or "[dim]none[/dim]")
        table.add_row("Notebook source", settings.notebooks.source_path or "[dim]none[/dim]")
        table.add_row("Notebook destination", settings.notebooks.destination_path or "[dim]none[/dim]")
        return table

    def menu(self) -> EditorState:
        console.print(self._render_settings())
        for key, _, label in MENU_OPTIONS:
            console.print(f"  [bold]{key}[/bold]. {label}")

        choice = self.prompter.choose("Select an option", [key for key, _, _ in MENU_OPTIONS])
        for key, state, _ in MENU_OPTIONS:
            if choice == key:
                return state
        return EditorState.QUIT

    def _commit(self, settings: RepoSettings) -> bool:
        try:
            self.session.commit(settings)
        except ConfigWriteError as e:
            console.print(f"[red]ERROR:[/red] {e}")
            return False
        console.print("[green]✓[/green] Settings saved")
        return True

    def edit_repo_type(self) -> EditorState:
        current = self.session.settings.repo_type
        console.print(f"Current repository type: [bold]{current.value}[/bold]")
        choice = self.prompter.choose(
            "New repository type (blank keeps it)", [t.value for t in RepoType]
        )
        if not choice:
            return EditorState.MENU

        repo_type = RepoType(choice)
        if not self._commit(replace(self.session.settings, repo_type=repo_type)):
            return EditorState.MENU

        if repo_type is RepoType.NOTEBOOKS and self.prompter.confirm(
            "Configure notebook paths now?"
        ):
            return EditorState.NOTEBOOK_PATHS
        return EditorState.MENU

    def edit_push_commands(self) -> EditorState:
        current = self.session.settings.push_commands
        console.print(f"Current push commands: [bold]{current or 'none'}[/bold]")
        commands = self.prompter.ask("Push commands, separated by ';' (blank keeps them)")
        if not commands:
            return EditorState.MENU

        self._commit(replace(self.session.settings, push_commands=commands))
        return EditorState.MENU

    def _ask_source(self) -> Path | None:
        while True:
            raw = self.prompter.ask("Notebook source path (absolute, blank cancels)")
            if not raw:
                return None
            try:
                source = Path(raw).expanduser()
            except RuntimeError:
                console.print(f"[red]ERROR:[/red] Cannot expand the home directory in: {raw}")
                continue
            if not source.is_absolute():
                console.print(f"[red]ERROR:[/red] Source path must be absolute: {raw}")
                continue
            if not source.exists():
                console.print(f"[red]ERROR:[/red] Source path does not exist: {source}")
                continue
            return source

    def _ask_destination(self, source: Path) -> str | None:
        root = self.session.repo_root
        while True:
            raw = self.prompter.ask(
                f"Notebook destination path (relative to {root} or absolute, blank cancels)"
            )
            if not raw:
                return None
            try:
                destination = resolve_path(raw, base=root)
            except RuntimeError:
                console.print(f"[red]ERROR:[/red] Cannot expand the home directory in: {raw}")
                continue
            if not destination.exists():
                console.print(f"[red]ERROR:[/red] Destination path does not exist: {destination}")
                continue
            if destination.resolve() == source.resolve():
                console.print("[red]ERROR:[/red] Destination must differ from the source path")
                continue
            return raw

    def edit_notebook_paths(self) -> EditorState:
        notebooks = self.session.settings.notebooks
        console.print(
            f"Current notebook paths: {notebooks.source_path or 'none'} -> "
            f"{notebooks.destination_path or 'none'}"
        )
        source = self._ask_source()
        if source is None:
            return EditorState.MENU
        destination = self._ask_destination(source)
        if destination is None:
            return EditorState.MENU

        self._commit(
            replace(
                self.session.settings,
                notebooks=NotebookPaths(source_path=str(source), destination_path=destination),
            )
        )
        return EditorState.MENU

    def edit_init_commands(self) -> EditorState:
        current = self.session.settings.init_commands
        console.print(f"Current init commands: [bold]{current or 'none'}[/bold]")
        commands = self.prompter.ask("Init commands, separated by ';' (blank keeps them)")
        if not commands:
            return EditorState.MENU

        if not self._commit(replace(self.session.settings, init_commands=commands)):
            return EditorState.MENU

        root = self.session.repo_root
        if self.prompter.confirm(f"Run the init commands in {root} now?"):
            try:
                self.runner(root, commands)
            except SubcommandFailure as e:
                console.print(f"[red]ERROR:[/red] {e}; remaining commands skipped")
        return EditorState.MENU
