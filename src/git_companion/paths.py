"""Path and repository resolution utilities."""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from .errors import NotAVersionControlRepository, PathNotFound


def default_base_dir() -> Path:
    """
    Directory relative paths are resolved against when no base is given.

    This is the directory of the invoked script when it exists on disk,
    otherwise the current working directory.
    """
    script = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
    if script is not None and script.is_file():
        return Path(os.path.abspath(script)).parent
    return Path.cwd()


def resolve_path(path: str | Path | None = None, base: str | Path | None = None) -> Path:
    """
    Resolve a path to an absolute Path object.

    Absolute paths are returned unchanged. Relative paths are joined to
    `base` and normalized (`.` and `..` collapsed) without touching the
    filesystem, so symlinks are not followed.

    Args:
        path: Path to resolve. If None or empty string, returns the base.
        base: Directory to resolve relative paths against.
              Defaults to `default_base_dir()`.

    Returns:
        Absolute Path object

    Example:
        resolve_path("../host", base="/work/tool")  # Returns /work/host
        resolve_path("/srv/repo")                   # Returns /srv/repo
    """
    base_dir = Path(base).expanduser() if base else default_base_dir()
    if not base_dir.is_absolute():
        base_dir = Path(os.path.abspath(base_dir))

    if not path:
        return base_dir

    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return candidate

    return Path(os.path.normpath(base_dir / candidate))


def relative_path(start: str | Path, target: str | Path) -> str:
    """
    Compute the relative path leading from `start` to `target`.

    Both paths must be absolute. Uses `os.path.relpath` and falls back to
    `relative_path_fallback` when it cannot relate the two (e.g. different
    drives on Windows).

    Returns:
        Relative path string using the platform separator, "." if equal.

    Example:
        relative_path("/work/host", "/work/host/tools/companion")  # "tools/companion"
        relative_path("/work/b", "/work/a")                        # "../a"
    """
    try:
        return os.path.relpath(target, start)
    except ValueError:
        return relative_path_fallback(start, target)


def relative_path_fallback(start: str | Path, target: str | Path) -> str:
    """
    Relative path via common prefix stripping.

    Drops the parts both paths share, then climbs out of what is left of
    `start` with `..` and descends into the rest of `target`. When the two
    paths share no anchor, `target` is returned as is.
    """
    start_parts = PurePath(os.path.normpath(start)).parts
    target_parts = PurePath(os.path.normpath(target)).parts

    if not start_parts or not target_parts or start_parts[0] != target_parts[0]:
        return str(target)

    common = 0
    for left, right in zip(start_parts, target_parts):
        if left != right:
            break
        common += 1

    parts = [os.pardir] * (len(start_parts) - common) + list(target_parts[common:])
    return os.path.join(*parts) if parts else os.curdir


def is_absolute_repo_path(repo: Path) -> bool:
    """
    Check if the given path is an absolute path to a git repository.

    Args:
        repo: Path to check

    Returns:
        True if path is absolute, is a directory, and contains .git

    Example:
        if is_absolute_repo_path(Path("/path/to/repo")):
            print("Valid git repository")
    """
    return (
        repo.is_absolute()
        and repo.is_dir()
        and (repo / ".git").exists()
    )


@dataclass
class RepoCheck:
    """Outcome of validating a configured repository path."""

    path: Path
    label: str
    valid: bool
    missing: bool = False
    messages: list[str] = field(default_factory=list)


def check_repo(path: str | Path, label: str) -> RepoCheck:
    """
    Check that a directory exists and holds git metadata.

    Nothing is initialized; the diagnostics tell the operator how to fix the
    situation instead.

    Args:
        path: Path of the repository root. Relative paths are checked
              against the current working directory.
        label: Human readable name used in messages (e.g. "host repository").

    Returns:
        RepoCheck with `valid` set and diagnostics in `messages`.

    Example:
        check = check_repo(Path("/srv/host"), "host repository")
        if not check.valid:
            print("\n".join(check.messages))
    """
    repo_path = Path(path)

    if not repo_path.exists():
        return RepoCheck(
            path=repo_path,
            label=label,
            valid=False,
            missing=True,
            messages=[
                f"The {label} path does not exist: {repo_path}",
                "Correct the configured path and run the command again.",
            ],
        )

    if not repo_path.is_dir():
        return RepoCheck(
            path=repo_path,
            label=label,
            valid=False,
            messages=[
                f"The {label} path is not a directory: {repo_path}",
                "Correct the configured path and run the command again.",
            ],
        )

    if not (repo_path / ".git").exists():
        return RepoCheck(
            path=repo_path,
            label=label,
            valid=False,
            messages=[
                f"The {label} at {repo_path} is not a git repository.",
                f"Run 'git init' in {repo_path} manually, "
                "or correct the configured path.",
            ],
        )

    return RepoCheck(path=repo_path, label=label, valid=True)


def require_repo(path: str | Path, label: str) -> Path:
    """
    Validate a repository path, raising if it is unusable.

    Raises:
        PathNotFound: If the path does not exist.
        NotAVersionControlRepository: If the path is not a directory or has
            no .git marker.
    """
    check = check_repo(path, label)
    if check.valid:
        return check.path
    if check.missing:
        raise PathNotFound(check.path, check.messages)
    raise NotAVersionControlRepository(check.path, check.messages)
