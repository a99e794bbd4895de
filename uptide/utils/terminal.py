"""Terminal output: step separators and the end-of-run summary."""

import shutil
from datetime import datetime
from typing import TYPE_CHECKING

import click

from uptide.enums import OutcomeStatus

if TYPE_CHECKING:
    from uptide.engine.outcome import Report

SEPARATOR_CHAR = "―"

STATUS_STYLES: dict[OutcomeStatus, tuple[str, str]] = {
    OutcomeStatus.SUCCESS: ("OK", "green"),
    OutcomeStatus.SKIPPED: ("SKIPPED", "yellow"),
    OutcomeStatus.IGNORED: ("IGNORED", "yellow"),
    OutcomeStatus.FAILED: ("FAILED", "red"),
}


def separator_line(title: str, width: int | None = None, now: datetime | None = None) -> str:
    """Build a separator line such as ``―― 14:02:11 - antibody ――――``."""
    if width is None:
        width = shutil.get_terminal_size((80, 20)).columns
    stamp = (now or datetime.now()).strftime("%H:%M:%S")
    label = f"{SEPARATOR_CHAR * 2} {stamp} - {title} "
    return label.ljust(width, SEPARATOR_CHAR)


def print_separator(title: str, width: int | None = None) -> None:
    """Print a bold section separator announcing ``title``."""
    click.echo()
    click.echo(click.style(separator_line(title, width), bold=True))


def print_summary(report: "Report") -> None:
    """Print every step outcome followed by per-status totals."""
    print_separator("Summary")

    for entry in report:
        label, color = STATUS_STYLES[entry.outcome.status]
        line = f"{entry.title}: {click.style(label, fg=color, bold=True)}"
        detail = entry.outcome.describe()
        if detail:
            line = f"{line} ({detail})"
        click.echo(line)

    counts = report.counts()
    totals = ", ".join(f"{counts[status]} {status}" for status in OutcomeStatus)
    click.echo(f"\n{len(report)} steps: {totals}")
