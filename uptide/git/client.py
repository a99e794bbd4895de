"""Bulk updating of git repositories.

Git.multi_pull updates every repository of a RepositorySet. Repositories do
not share state, so the pulls run concurrently under a semaphore that bounds
the number of git processes. A failure in one repository is recorded in the
PullSummary and never prevents the others from being updated.

Execution Flow (per repository):
    1. Read HEAD (skipped in dry-run mode)
    2. git pull with the configured arguments
    3. git submodule update when the checkout has a .gitmodules file
    4. Read HEAD again and report either "Up-to-date" or the new commits

Example:
    >>> summary = await ctx.git.multi_pull(repos, ctx)
    >>> summary.failed
    ['/home/me/.oh-my-zsh/custom/themes/broken']
    >>> summary.raise_for_failures()
    Traceback (most recent call last):
    ...
    uptide.exceptions.MultiPullError: Failed to pull 1 repositories: ...
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import click
import structlog

from uptide.config.settings import GitConfig
from uptide.engine.outcome import Outcome
from uptide.exceptions import MultiPullError
from uptide.git.repositories import RepositorySet

if TYPE_CHECKING:
    from uptide.engine.context import ExecutionContext

log = structlog.get_logger(__name__)


@dataclass
class PullSummary:
    """Per-repository outcomes of one multi-pull.

    Attributes:
        outcomes: Outcome for each repository, keyed by path
        changed: Paths whose HEAD moved during the pull
    """

    outcomes: dict[str, Outcome] = field(default_factory=dict)
    changed: set[str] = field(default_factory=set)

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> list[str]:
        return sorted(path for path, outcome in self.outcomes.items() if not outcome.is_failure)

    @property
    def failed(self) -> list[str]:
        return sorted(path for path, outcome in self.outcomes.items() if outcome.is_failure)

    @property
    def updated(self) -> list[str]:
        return sorted(self.changed)

    def raise_for_failures(self) -> None:
        """Raise MultiPullError if any repository failed to update."""
        failures = {path: self.outcomes[path].describe() for path in self.failed}
        if failures:
            raise MultiPullError(failures)


class Git:
    """Git collaborator shared by every step through the execution context.

    Attributes:
        config: Concurrency and pull settings
    """

    def __init__(self, config: GitConfig | None = None) -> None:
        self.config = config or GitConfig()

    async def multi_pull(self, repositories: RepositorySet, ctx: "ExecutionContext") -> PullSummary:
        """Pull every repository in ``repositories``.

        An empty set returns an empty summary without looking for git.

        Args:
            repositories: Repositories to update
            ctx: Execution context providing the executors and resolver

        Returns:
            PullSummary with one outcome per repository

        Raises:
            RequirementMissing: If git is not installed and the set is not empty
        """
        summary = PullSummary()
        if not repositories:
            return summary

        git = ctx.requirements.require("git")
        semaphore = asyncio.Semaphore(self.config.max_concurrency)
        paths = repositories.paths()

        log.info("multi_pull_started", repositories=len(paths), max_concurrency=self.config.max_concurrency)

        async def pull_one(path: Path) -> tuple[Outcome, bool]:
            async with semaphore:
                try:
                    changed = await self._pull(git, path, ctx)
                except Exception as e:
                    log.warning("repository_pull_failed", path=str(path), error=str(e))
                    click.echo(f"{click.style('✗', fg='red')} {path}: {e}")
                    return Outcome.failed(e), False
                return Outcome.success(), changed

        results = await asyncio.gather(*(pull_one(path) for path in paths))

        for path, (outcome, changed) in zip(paths, results, strict=True):
            summary.outcomes[str(path)] = outcome
            if changed:
                summary.changed.add(str(path))

        log.info(
            "multi_pull_complete",
            succeeded=len(summary.succeeded),
            failed=len(summary.failed),
            updated=len(summary.changed),
        )
        return summary

    async def _pull(self, git: Path, path: Path, ctx: "ExecutionContext") -> bool:
        """Update one checkout. Returns True if its HEAD moved."""
        before = None if ctx.is_dry_run else await self.head(git, path, ctx)

        await ctx.executor.output_checked(git, "pull", *self.config.pull_arguments, cwd=path)
        if (path / ".gitmodules").exists():
            await ctx.executor.output_checked(
                git, "submodule", "update", "--init", "--recursive", cwd=path
            )

        if ctx.is_dry_run:
            return False

        after = await self.head(git, path, ctx)
        if before == after:
            click.echo(f"{click.style('✓', fg='green')} {path}: Up-to-date")
            return False

        log_result = await ctx.probe.output_checked(
            git, "log", "--no-decorate", "--oneline", f"{before}..{after}", cwd=path
        )
        click.echo(f"{click.style('✓', fg='green')} {path}: Updated")
        for line in log_result.stdout.splitlines():
            click.echo(f"    {line}")
        return True

    async def head(self, git: Path, path: Path, ctx: "ExecutionContext") -> str:
        """Current commit of the checkout at ``path``."""
        result = await ctx.probe.output_checked(git, "rev-parse", "HEAD", cwd=path)
        return result.stdout.strip()
