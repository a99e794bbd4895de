"""Discovery of git working trees under a plugin directory.

Several plugin managers keep their plugins and themes as a directory of
independent git clones. RepositorySet collects those clones so they can be
updated as a batch by Git.multi_pull.

Example:
    >>> repos = RepositorySet()
    >>> repos.discover(Path("~/.oh-my-zsh/custom").expanduser())
    >>> repos.remove(Path("~/.oh-my-zsh").expanduser())
    >>> len(repos)
    3
"""

import os
from collections.abc import Iterator
from pathlib import Path

import structlog
from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from uptide.exceptions import DiscoveryError

log = structlog.get_logger(__name__)

DEFAULT_DISCOVERY_DEPTH = 2


def canonical_key(path: str | Path) -> str:
    """Canonical string identifying ``path`` (absolute, symlinks resolved)."""
    return str(Path(path).expanduser().resolve())


class RepositorySet:
    """Deduplicated collection of git working-tree roots.

    Keys are canonical paths, so the same checkout reached through different
    spellings (relative paths, symlinks) is stored once.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Path] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Path]:
        return iter(list(self._entries.values()))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str | Path):
            return False
        return canonical_key(path) in self._entries

    def paths(self) -> list[Path]:
        """Repository paths sorted for stable display."""
        return sorted(self._entries.values())

    def insert_if_repo(self, path: str | Path) -> bool:
        """Add ``path`` if it is the root of a git working tree.

        Returns:
            True if ``path`` is a repository root (newly added or already
            present), False otherwise
        """
        try:
            repo = Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError):
            return False

        try:
            if repo.working_tree_dir is None:
                return False
            key = canonical_key(repo.working_tree_dir)
        finally:
            repo.close()

        if key not in self._entries:
            log.debug("repository_discovered", path=key)
            self._entries[key] = Path(key)
        return True

    def remove(self, path: str | Path) -> bool:
        """Remove ``path`` from the set. Returns True if it was present."""
        return self._entries.pop(canonical_key(path), None) is not None

    def discover(self, root: str | Path, max_depth: int = DEFAULT_DISCOVERY_DEPTH) -> int:
        """Insert every repository root found within ``max_depth`` of ``root``.

        ``root`` itself is depth 0. Symlinks are not followed and ``.git``
        directories are never descended into. A root that does not exist
        contains no repositories.

        Args:
            root: Directory to walk
            max_depth: Deepest level examined

        Returns:
            Number of repositories in the set afterwards

        Raises:
            DiscoveryError: If a directory cannot be read
        """
        root = Path(root)
        if not root.is_dir():
            log.debug("discovery_root_missing", root=str(root))
            return len(self)

        def on_error(error: OSError) -> None:
            raise DiscoveryError(
                f"Cannot read {error.filename}: {error.strerror}",
                path=error.filename,
            ) from error

        base_depth = len(root.parts)
        self.insert_if_repo(root)

        for current, dirnames, _ in os.walk(root, onerror=on_error):
            depth = len(Path(current).parts) - base_depth
            dirnames[:] = sorted(name for name in dirnames if name != ".git")

            if depth >= max_depth:
                dirnames.clear()
                continue

            for name in dirnames:
                self.insert_if_repo(Path(current) / name)

        log.debug("repository_discovery_complete", root=str(root), count=len(self))
        return len(self)
