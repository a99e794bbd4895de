"""Git repository discovery and bulk updates.

RepositorySet collects the git working trees found under a plugin
directory; Git.multi_pull updates them concurrently and reports one outcome
per repository.

Example:
    >>> from uptide.git import RepositorySet
    >>> repos = RepositorySet()
    >>> repos.discover(custom_dir)
    >>> summary = await ctx.git.multi_pull(repos, ctx)
"""

from uptide.git.client import Git, PullSummary
from uptide.git.repositories import DEFAULT_DISCOVERY_DEPTH, RepositorySet

__all__ = [
    "DEFAULT_DISCOVERY_DEPTH",
    "Git",
    "PullSummary",
    "RepositorySet",
]
