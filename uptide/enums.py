"""Enumerations shared across the uptide engine."""

from enum import Enum


class RunType(str, Enum):
    """Whether commands are actually spawned or only traced.

    Chosen once per run and observed by every step.
    """

    DRY_RUN = "dry-run"
    EXECUTE = "execute"

    def __str__(self) -> str:
        return self.value

    @property
    def is_dry_run(self) -> bool:
        return self is RunType.DRY_RUN

    @classmethod
    def from_flag(cls, dry_run: bool) -> "RunType":
        return cls.DRY_RUN if dry_run else cls.EXECUTE


class OutcomeStatus(str, Enum):
    """Classified result of a step or of a single repository update.

    IGNORED covers errors that are logged but do not count as failures,
    such as a tool exiting with an accepted non-zero code.
    """

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"
    IGNORED = "ignored"

    def __str__(self) -> str:
        return self.value
