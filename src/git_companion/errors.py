"""
Exception types used across git-companion.

Library code raises these; the CLI layer is the only place that turns them
into a diagnostic and an exit code.
"""

from pathlib import Path


class GitCompanionError(Exception):
    """Base class for all git-companion errors."""


class ConfigError(GitCompanionError):
    """Base class for configuration document failures."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class ConfigNotFound(ConfigError):
    """Raised when a configuration file is missing or unreadable."""


class ConfigParseError(ConfigError):
    """Raised when a configuration file is not valid JSON or lacks a required field."""


class ConfigWriteError(ConfigError):
    """Raised when a configuration file cannot be written."""


class RepositoryError(GitCompanionError):
    """
    Base class for repository validation failures.

    `messages` holds the diagnostics shown to the operator, one per line.
    """

    def __init__(self, path: Path, messages: list[str]):
        self.path = path
        self.messages = messages
        super().__init__("\n".join(messages))


class PathNotFound(RepositoryError):
    """Raised when a configured repository path does not exist."""


class NotAVersionControlRepository(RepositoryError):
    """Raised when a path exists but is not a directory holding a .git marker."""


class SubcommandFailure(GitCompanionError):
    """Raised when a stored git subcommand exits non-zero."""

    def __init__(self, command: str, returncode: int):
        self.command = command
        self.returncode = returncode
        super().__init__(f"'git {command}' failed with exit status {returncode}")


class IgnoreFileUpdateFailure(GitCompanionError):
    """Raised when the host exclude file cannot be updated. Never fatal."""
