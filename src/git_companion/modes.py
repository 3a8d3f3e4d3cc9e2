"""
Attach the companion to its host repository, or detach it.

Both modes rewrite the instance config and regenerate the working config.
Attaching also registers the companion checkout in the host's local
exclude file so it never shows up as untracked content there.
"""

import logging
import os
import subprocess
from pathlib import Path, PurePath

from .config import ConfigPaths, InstanceType, WorkingConfig
from .errors import ConfigParseError, IgnoreFileUpdateFailure
from .git import exclude_file
from .paths import relative_path, require_repo

logger = logging.getLogger(__name__)


def detach(paths: ConfigPaths) -> WorkingConfig:
    """
    Run the companion standalone, against its own repository.

    Returns:
        The regenerated working config.

    Raises:
        ConfigError: If the instance config cannot be read or written.
        RepositoryError: If the instance root is not a git repository.
    """
    instance = paths.load_instance()
    instance.instance_type = InstanceType.STANDALONE

    instance_root = require_repo(instance.instance_root(paths.config_dir), "instance repository")
    paths.save_instance(instance)

    working = WorkingConfig.project(instance.settings, instance_root)
    paths.save_working(working)
    logger.info("Detached: working repository is %s", instance_root)
    return working


def attach(paths: ConfigPaths) -> WorkingConfig:
    """
    Attach the companion to the host repository named in the instance config.

    The working config takes its repository type and push commands from the
    host config. Failing to update the host exclude file is logged and
    otherwise ignored.

    Returns:
        The regenerated working config.

    Raises:
        ConfigError: If a config document is missing, malformed or unwritable.
        RepositoryError: If either root is not a git repository.
    """
    instance = paths.load_instance()
    instance.instance_type = InstanceType.COMPANION

    host_root = instance.host_root(paths.config_dir)
    if host_root is None:
        raise ConfigParseError(paths.instance_file, "missing field 'hostRepoRoot'")

    instance_root = require_repo(instance.instance_root(paths.config_dir), "instance repository")
    host_root = require_repo(host_root, "host repository")
    host = paths.load_host(host_root)
    paths.save_instance(instance)

    working = WorkingConfig.project(host.settings, host_root)
    paths.save_working(working)
    logger.info("Attached: working repository is %s", host_root)

    try:
        register_ignore_pattern(host_root, instance_root)
    except IgnoreFileUpdateFailure as e:
        logger.warning("Could not update the host exclude file: %s", e)

    return working


def ignore_pattern(host_root: Path, instance_root: Path) -> str | None:
    """
    Exclude pattern naming the instance checkout inside the host.

    Patterns use forward slashes and end with a slash so they only match
    directories. Leading `..` segments are dropped because git patterns
    cannot reach outside the work tree.

    Returns:
        The pattern, or None when both roots are the same directory.

    Example:
        ignore_pattern(Path("/srv/host"), Path("/srv/host/tools/companion"))  # "tools/companion/"
        ignore_pattern(Path("/tmp/b"), Path("/tmp/a"))                         # "a/"
    """
    relative = relative_path(host_root, instance_root)
    parts = [part for part in PurePath(relative).parts if part not in (os.curdir, os.pardir)]
    if not parts:
        return None
    if parts != list(PurePath(relative).parts):
        logger.debug("%s lies outside %s; registering %s", instance_root, host_root, "/".join(parts))
    return "/".join(parts) + "/"


def _equivalent_forms(pattern: str) -> set[str]:
    return {pattern, f"/{pattern}", f"./{pattern}"}


def register_ignore_pattern(host_root: Path, instance_root: Path) -> str | None:
    """
    Append the instance pattern to the host's exclude file, once.

    Existing entries are compared in their `x/`, `/x/` and `./x/` forms, so
    running this repeatedly never duplicates the entry.

    Returns:
        The pattern appended, or None if nothing was written.

    Raises:
        IgnoreFileUpdateFailure: If the exclude file cannot be located, read or written.
    """
    pattern = ignore_pattern(host_root, instance_root)
    if pattern is None:
        logger.info("Instance and host share a root; no exclude pattern needed")
        return None

    try:
        target = exclude_file(host_root)
    except (OSError, subprocess.CalledProcessError) as e:
        raise IgnoreFileUpdateFailure(f"cannot locate the exclude file of {host_root}: {e}") from e

    try:
        existing = target.read_text(encoding="utf-8") if target.exists() else ""
    except (OSError, UnicodeDecodeError) as e:
        raise IgnoreFileUpdateFailure(f"cannot read {target}: {e}") from e

    entries = {
        stripped
        for line in existing.splitlines()
        if (stripped := line.strip()) and not stripped.startswith("#")
    }
    if entries & _equivalent_forms(pattern):
        logger.info("%s already lists %s", target, pattern)
        return None

    prefix = "" if not existing or existing.endswith("\n") else "\n"
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "a", encoding="utf-8") as f:
            f.write(f"{prefix}{pattern}\n")
    except OSError as e:
        raise IgnoreFileUpdateFailure(f"cannot write {target}: {e}") from e

    logger.info("Added %s to %s", pattern, target)
    return pattern
