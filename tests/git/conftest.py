"""Fixtures creating real git repositories for discovery and pull tests."""

import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

# These tests drive a real git binary.
if shutil.which("git") is None:
    collect_ignore_glob = ["test_*.py"]


def git(*args: str, cwd: Path) -> str:
    """Run git in ``cwd`` and return its stdout."""
    result = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
    return result.stdout


def commit(repo: Path, name: str, content: str = "content\n") -> str:
    """Write ``name`` in ``repo``, commit it and return the new HEAD."""
    (repo / name).write_text(content)
    git("add", name, cwd=repo)
    git("commit", "-q", "-m", f"Add {name}", cwd=repo)
    return git("rev-parse", "HEAD", cwd=repo).strip()


@pytest.fixture
def make_repo() -> Callable[..., Path]:
    """Initialize a git repository with one commit at the given path."""

    def factory(path: Path, initial_commit: bool = True) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        git("init", "-q", cwd=path)
        git("config", "user.email", "test@example.com", cwd=path)
        git("config", "user.name", "Test User", cwd=path)
        if initial_commit:
            commit(path, "README.md", "# Test Repository\n")
        return path

    return factory


@pytest.fixture
def make_clone(make_repo) -> Callable[[Path, Path], Path]:
    """Clone ``upstream`` to ``path`` so that ``git pull`` has something to pull."""

    def factory(upstream: Path, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        git("clone", "-q", str(upstream), str(path), cwd=path.parent)
        git("config", "user.email", "test@example.com", cwd=path)
        git("config", "user.name", "Test User", cwd=path)
        return path

    return factory


@pytest.fixture
def run_git() -> Callable[..., str]:
    return git


@pytest.fixture
def make_commit() -> Callable[..., str]:
    return commit
