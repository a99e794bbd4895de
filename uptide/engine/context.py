"""Execution context shared by every step of a run.

This module provides the ExecutionContext dataclass: the run mode, the
environment snapshot, base directories and collaborator handles. The driver
builds it once per run and passes the same instance to every step.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

import structlog

from uptide.config.settings import UptideSettings
from uptide.engine.executor import CommandExecutor
from uptide.engine.requirements import RequirementResolver
from uptide.enums import RunType
from uptide.git.client import Git
from uptide.utils.paths import BaseDirs

log = structlog.get_logger(__name__)

PRIVILEGE_PROGRAMS = ("sudo", "doas")


@dataclass(frozen=True)
class ExecutionContext:
    """Read-only configuration bundle passed to every step.

    Attributes:
        run_type: DRY_RUN or EXECUTE, fixed for the whole run
        base_dirs: Home, config and data directories
        requirements: Shared requirement cache
        git: Git collaborator used for bulk repository updates
        environ: Snapshot of the process environment
        sudo: Privilege escalation program, if one is installed
        settings: Loaded settings
        executor: Executor honouring ``run_type``
        probe: Executor that always runs, for read-only queries outside dry run
    """

    run_type: RunType
    base_dirs: BaseDirs
    requirements: RequirementResolver
    git: Git
    environ: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(dict(os.environ)))
    sudo: Path | None = None
    settings: UptideSettings = field(default_factory=UptideSettings)
    executor: CommandExecutor = field(init=False, repr=False, compare=False)
    probe: CommandExecutor = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "environ", MappingProxyType(dict(self.environ)))
        object.__setattr__(self, "executor", CommandExecutor(self.run_type))
        object.__setattr__(self, "probe", CommandExecutor(RunType.EXECUTE))

    @classmethod
    def create(
        cls,
        settings: UptideSettings,
        run_type: RunType | None = None,
        environ: Mapping[str, str] | None = None,
        base_dirs: BaseDirs | None = None,
    ) -> "ExecutionContext":
        """Build the context for one run.

        Args:
            settings: Loaded settings
            run_type: Run mode, defaults to ``settings.dry_run``
            environ: Environment snapshot, defaults to ``os.environ``
            base_dirs: Base directories, derived from ``environ`` by default

        Raises:
            ConfigurationError: If the home directory cannot be determined
        """
        env = dict(os.environ if environ is None else environ)
        if run_type is None:
            run_type = RunType.from_flag(settings.dry_run)
        if base_dirs is None:
            base_dirs = BaseDirs.from_environment(env)

        requirements = RequirementResolver(env.get("PATH", os.defpath))
        sudo = next(
            (path for name in PRIVILEGE_PROGRAMS if (path := requirements.which(name)) is not None),
            None,
        )

        log.debug(
            "execution_context_created",
            run_type=str(run_type),
            home=str(base_dirs.home_dir),
            sudo=str(sudo) if sudo else None,
        )

        return cls(
            run_type=run_type,
            base_dirs=base_dirs,
            requirements=requirements,
            git=Git(settings.git),
            environ=env,
            sudo=sudo,
            settings=settings,
        )

    @property
    def is_dry_run(self) -> bool:
        return self.run_type.is_dry_run

    def env(self, name: str) -> str | None:
        """Value of environment variable ``name``; empty counts as unset."""
        return self.environ.get(name) or None
