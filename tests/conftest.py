"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Callable, Mapping
from pathlib import Path

import pytest
import structlog

from uptide.config.settings import GitConfig, UptideSettings
from uptide.engine.context import ExecutionContext
from uptide.engine.requirements import RequirementResolver
from uptide.enums import RunType
from uptide.git.client import Git
from uptide.utils.paths import BaseDirs

ToolFactory = Callable[..., Path]
ContextFactory = Callable[..., ExecutionContext]


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any logging configuration done by a test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """Directory used as the only entry of the resolver search path."""
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    """Fake home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def make_tool(bin_dir: Path) -> ToolFactory:
    """Create an executable shell script in ``bin_dir``.

    Example:
        >>> make_tool("antibody", "exit 0")
    """

    def factory(name: str, body: str = "exit 0") -> Path:
        tool = bin_dir / name
        tool.write_text(f"#!/bin/sh\n{body}\n")
        tool.chmod(0o755)
        return tool

    return factory


@pytest.fixture
def base_dirs(home_dir: Path) -> BaseDirs:
    return BaseDirs(
        home_dir=home_dir,
        config_dir=home_dir / ".config",
        data_dir=home_dir / ".local" / "share",
    )


@pytest.fixture
def make_context(bin_dir: Path, base_dirs: BaseDirs) -> ContextFactory:
    """Build an ExecutionContext whose search path is only ``bin_dir``."""

    def factory(
        run_type: RunType = RunType.EXECUTE,
        environ: Mapping[str, str] | None = None,
        settings: UptideSettings | None = None,
        search_path: str | None = None,
    ) -> ExecutionContext:
        settings = settings or UptideSettings(git=GitConfig(max_concurrency=2))
        return ExecutionContext(
            run_type=run_type,
            base_dirs=base_dirs,
            requirements=RequirementResolver(str(bin_dir) if search_path is None else search_path),
            git=Git(settings.git),
            environ=dict(environ or {"HOME": str(base_dirs.home_dir)}),
            settings=settings,
        )

    return factory


@pytest.fixture
def system_path() -> str:
    """The real PATH, for tests that need system tools such as git."""
    return os.environ.get("PATH", os.defpath)
