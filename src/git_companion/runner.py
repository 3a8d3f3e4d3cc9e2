"""Replay stored `;`-delimited git subcommand lists."""

import logging
import os
import shlex
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .console import console
from .errors import SubcommandFailure
from .git import GIT, run_git

logger = logging.getLogger(__name__)


@contextmanager
def working_directory(path: Path) -> Iterator[Path]:
    """
    Temporarily change the process working directory.

    The previous directory is restored on every exit path, including
    exceptions and KeyboardInterrupt.

    Example:
        with working_directory(Path("/srv/host")):
            run_git("status")
    """
    previous = Path.cwd()
    os.chdir(path)
    try:
        yield path
    finally:
        os.chdir(previous)


def split_commands(commands: str) -> list[str]:
    """
    Split a stored command list into its non-blank subcommands.

    >>> split_commands("add -A; ;commit -m wip ;")
    ['add -A', 'commit -m wip']
    """
    return [stripped for segment in commands.split(";") if (stripped := segment.strip())]


def run_commands(repo_root: Path, commands: str, *, git: str = GIT) -> list[str]:
    """
    Run each subcommand of `commands` as a git invocation inside `repo_root`.

    Commands run one after another with their output going straight to the
    terminal. Execution stops at the first command that exits non-zero.

    Args:
        repo_root: Repository to run the commands in.
        commands: `;`-delimited git subcommands, without the leading "git".
        git: Name or path of the git executable.

    Returns:
        The subcommands that ran successfully, in order.

    Raises:
        SubcommandFailure: For the first command that exits non-zero.

    Example:
        run_commands(Path("/srv/host"), "fetch origin; status --short")
    """
    succeeded: list[str] = []
    with working_directory(repo_root):
        for command in split_commands(commands):
            logger.debug("Running 'git %s' in %s", command, repo_root)
            try:
                result = run_git(*shlex.split(command), check=False, git=git)
            except ValueError as e:
                # Unbalanced quotes; git's own usage error status
                raise SubcommandFailure(command, 129) from e
            except FileNotFoundError as e:
                raise SubcommandFailure(command, 127) from e
            if result.returncode != 0:
                raise SubcommandFailure(command, result.returncode)
            console.print(f"[green]✓[/green] git {command}")
            succeeded.append(command)
    return succeeded
