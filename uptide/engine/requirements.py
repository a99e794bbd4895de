"""Requirement resolution: locating external programs on the search path.

Steps ask the resolver for the tools they drive before doing any work. A
missing tool is a normal condition (the tool simply is not installed) and
raises RequirementMissing, which the step runner reports as a skip.

Lookups are memoized for the lifetime of the resolver. The search path is
captured once at construction, so repeated lookups within a run are
deterministic even if the environment changes underneath.

Thread Safety:
    The cache is guarded by a lock, so a resolver may be shared with helper
    threads spawned by individual steps.
"""

import os
import shutil
import threading
from pathlib import Path

import structlog

from uptide.exceptions import RequirementMissing

log = structlog.get_logger(__name__)


class RequirementResolver:
    """Memoizing lookup of programs on a fixed search path.

    Attributes:
        search_path: The ``os.pathsep``-separated directories searched
    """

    def __init__(self, search_path: str | None = None) -> None:
        """Initialize the resolver.

        Args:
            search_path: Directories to search. Defaults to ``PATH`` as it is
                at construction time, or ``os.defpath`` when unset.
        """
        if search_path is None:
            search_path = os.environ.get("PATH", os.defpath)
        self.search_path = search_path
        self._cache: dict[str, Path | None] = {}
        self._lock = threading.Lock()

    def which(self, name: str) -> Path | None:
        """Locate ``name`` on the search path.

        Args:
            name: Program name, must be non-empty

        Returns:
            Absolute path of the program, or None if it is not installed

        Raises:
            ValueError: If name is empty
        """
        if not name:
            raise ValueError("Requirement name must not be empty")

        with self._lock:
            if name in self._cache:
                return self._cache[name]

            found = shutil.which(name, path=self.search_path)
            resolved = Path(os.path.abspath(found)) if found else None
            self._cache[name] = resolved

        log.debug("requirement_resolved", name=name, path=str(resolved) if resolved else None)
        return resolved

    def require(self, name: str) -> Path:
        """Locate ``name`` or raise RequirementMissing.

        Raises:
            RequirementMissing: If the program is not on the search path
            ValueError: If name is empty
        """
        path = self.which(name)
        if path is None:
            raise RequirementMissing(name)
        return path

    @staticmethod
    def require_path(path: str | Path) -> Path:
        """Return ``path`` if it exists, raise RequirementMissing otherwise.

        Used for files and directories a step depends on, such as a plugin
        manager's install directory.
        """
        path = Path(path)
        if not path.exists():
            log.debug("required_path_missing", path=str(path))
            raise RequirementMissing(str(path))
        return path

    def cached(self) -> dict[str, Path | None]:
        """Snapshot of the lookups performed so far."""
        with self._lock:
            return dict(self._cache)
