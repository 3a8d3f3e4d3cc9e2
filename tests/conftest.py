"""Shared pytest fixtures for git-companion tests."""

import json
import subprocess
from pathlib import Path

import pytest

from git_companion.config import ConfigPaths


def init_repo(path: Path) -> Path:
    """Create a git repository with a single commit at `path`."""
    path.mkdir(parents=True, exist_ok=True)

    subprocess.run(["git", "init"], cwd=path, check=True, capture_output=True)
    subprocess.run(
        ["git", "config", "user.email", "test@example.com"],
        cwd=path,
        check=True,
        capture_output=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "Test User"],
        cwd=path,
        check=True,
        capture_output=True,
    )

    (path / "README.md").write_text("# Test Repo\n")
    subprocess.run(["git", "add", "README.md"], cwd=path, check=True, capture_output=True)
    subprocess.run(
        ["git", "commit", "-m", "Initial commit"],
        cwd=path,
        check=True,
        capture_output=True,
    )
    return path


def write_json(path: Path, document: dict) -> Path:
    path.write_text(json.dumps(document, indent=2) + "\n")
    return path


def read_json(path: Path) -> dict:
    return json.loads(path.read_text())


@pytest.fixture
def git_repo(tmp_path):
    """
    Create a temporary git repository for testing.

    Returns:
        Path: Path to the temporary git repository
    """
    return init_repo(tmp_path / "test-repo")


@pytest.fixture
def make_repo(tmp_path):
    """Factory creating git repositories below tmp_path by name."""

    def factory(name: str) -> Path:
        return init_repo(tmp_path / name)

    return factory


@pytest.fixture
def companion(tmp_path, make_repo):
    """
    A companion checkout `a` next to a host repository `b`.

    The instance and working configs live in a separate `tool` directory.

    Returns:
        tuple: (ConfigPaths, instance_root, host_root)
    """
    instance_root = make_repo("a")
    host_root = make_repo("b")
    config_dir = tmp_path / "tool"
    config_dir.mkdir()

    write_json(
        config_dir / "instance_config.json",
        {
            "instanceType": "standalone",
            "instanceRepoRoot": str(instance_root),
            "hostRepoRoot": str(host_root),
            "repoType": "notebooks",
            "repoPush": "push instance main",
        },
    )
    write_json(
        host_root / "repo_config.json",
        {"repoType": "regular", "repoPush": "push origin main"},
    )
    return ConfigPaths(config_dir), instance_root, host_root
