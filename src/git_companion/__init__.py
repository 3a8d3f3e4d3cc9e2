"""Companion repository workflow utilities.

Attach a utility repository to a host repository or run it standalone, keep
its workflow settings in sync, and replay stored git command lists.
"""

# Re-export all public functions from submodules
from .config import (
    ConfigPaths,
    ConfigSource,
    HostConfig,
    InstanceConfig,
    InstanceType,
    RepoSettings,
    RepoType,
    WorkingConfig,
    load_json,
    save_json,
)
from .modes import (
    attach,
    detach,
    ignore_pattern,
    register_ignore_pattern,
)
from .paths import (
    check_repo,
    is_absolute_repo_path,
    relative_path,
    require_repo,
    resolve_path,
)
from .runner import (
    run_commands,
    split_commands,
    working_directory,
)

__all__ = (
    "ConfigPaths",
    "ConfigSource",
    "HostConfig",
    "InstanceConfig",
    "InstanceType",
    "RepoSettings",
    "RepoType",
    "WorkingConfig",
    "attach",
    "check_repo",
    "detach",
    "ignore_pattern",
    "is_absolute_repo_path",
    "load_json",
    "register_ignore_pattern",
    "relative_path",
    "require_repo",
    "resolve_path",
    "run_commands",
    "save_json",
    "split_commands",
    "working_directory",
)
