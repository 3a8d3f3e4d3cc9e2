"""Core git operations."""

import subprocess
from pathlib import Path
from typing import Any

GIT = "git"


def run_git(
    *args: str,
    repo: Path | None = None,
    check: bool = True,
    capture: bool = False,
    git: str = GIT,
    **kwargs: Any,
) -> subprocess.CompletedProcess:
    """
    Run a git command and return the result.

    Args:
        *args: Git command arguments (e.g., "status", "--porcelain")
        repo: Optional repository path. If None, runs in current directory.
        check: Whether to raise CalledProcessError on non-zero exit (default: True)
        capture: Whether to capture stdout/stderr (default: False)
        git: Name or path of the git executable.
        **kwargs: Additional arguments to pass to subprocess.run()

    Returns:
        CompletedProcess result

    Example:
        # Run in current directory
        run_git("status", "--short", capture=True)

        # Run in specific repo
        run_git("fetch", "--all", repo=Path("/path/to/repo"))
    """
    cmd = [git]

    # Add -C flag if repo is specified
    if repo is not None:
        cmd.extend(["-C", str(repo)])

    cmd.extend(args)

    if capture:
        return subprocess.run(
            cmd, capture_output=True, text=True, check=check, **kwargs
        )

    return subprocess.run(cmd, check=check, **kwargs)


def get_git_common_dir(repo: Path) -> Path:
    """
    Get the common .git directory for a repository.

    For worktrees, this returns the main repo's .git directory where shared
    data (info/exclude, hooks, refs) is stored. For regular repos,
    returns the .git directory.

    Args:
        repo: Repository path.

    Returns:
        Path to the common .git directory (always absolute).

    Raises:
        subprocess.CalledProcessError: If git cannot locate the directory.
    """
    result = run_git("rev-parse", "--git-common-dir", repo=repo, capture=True)
    git_dir = Path(result.stdout.strip())

    # The output may be relative to the repo, not cwd
    if not git_dir.is_absolute():
        git_dir = repo / git_dir

    return git_dir.resolve()


def exclude_file(repo: Path) -> Path:
    """
    Location of the repository's local, untracked exclude file.

    Example:
        exclude_file(Path("/srv/host"))  # /srv/host/.git/info/exclude
    """
    return get_git_common_dir(repo) / "info" / "exclude"
