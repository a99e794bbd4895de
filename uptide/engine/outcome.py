"""Outcomes of steps and repository updates, and the run report."""

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass

from uptide.enums import OutcomeStatus


@dataclass(frozen=True)
class Outcome:
    """Classified result of one step or one repository update.

    Attributes:
        status: The classification
        reason: Why a step was skipped
        error: The error behind a FAILED or IGNORED outcome
    """

    status: OutcomeStatus
    reason: str | None = None
    error: BaseException | None = None

    @classmethod
    def success(cls) -> "Outcome":
        return cls(OutcomeStatus.SUCCESS)

    @classmethod
    def skipped(cls, reason: str) -> "Outcome":
        return cls(OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, error: BaseException) -> "Outcome":
        return cls(OutcomeStatus.FAILED, error=error)

    @classmethod
    def ignored(cls, error: BaseException) -> "Outcome":
        return cls(OutcomeStatus.IGNORED, error=error)

    @property
    def is_failure(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    def describe(self) -> str:
        """One-line explanation, empty for plain successes."""
        if self.reason:
            return self.reason
        if self.error is not None:
            return str(self.error) or type(self.error).__name__
        return ""


@dataclass(frozen=True)
class ReportEntry:
    """One line of the report: a step and how it ended."""

    step: str
    title: str
    outcome: Outcome


class Report:
    """Ordered, append-only record of step outcomes for one run.

    Entries keep the order in which steps ran. The driver reads the report
    once all steps have finished and derives the process exit code from it.
    """

    def __init__(self) -> None:
        self._entries: list[ReportEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ReportEntry]:
        return iter(self._entries)

    @property
    def entries(self) -> tuple[ReportEntry, ...]:
        return tuple(self._entries)

    def record(self, step: str, title: str, outcome: Outcome) -> ReportEntry:
        entry = ReportEntry(step=step, title=title, outcome=outcome)
        self._entries.append(entry)
        return entry

    def counts(self) -> dict[OutcomeStatus, int]:
        """Number of entries per status, including zero counts."""
        tally = Counter(entry.outcome.status for entry in self._entries)
        return {status: tally.get(status, 0) for status in OutcomeStatus}

    @property
    def failed(self) -> list[ReportEntry]:
        return [entry for entry in self._entries if entry.outcome.is_failure]

    @property
    def has_failures(self) -> bool:
        return any(entry.outcome.is_failure for entry in self._entries)

    @property
    def exit_code(self) -> int:
        """Process exit code: 0 unless some step FAILED."""
        return 1 if self.has_failures else 0
