"""
Step runner with per-step failure isolation.

Steps run strictly one after another in their declared order. Each is
announced with a separator, invoked, and classified:

    returns None / success      -> SUCCESS
    returns an Outcome          -> that Outcome
    raises SkipStep             -> SKIPPED (tool absent or not applicable)
    raises NonZeroExitError     -> IGNORED if the code is accepted for the step
    raises any other Exception  -> FAILED

Whatever happens, the outcome is appended to the Report and the next step
runs. Only BaseException subclasses such as KeyboardInterrupt escape, ending
the whole run.
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field

import structlog

from uptide.engine.context import ExecutionContext
from uptide.engine.outcome import Outcome, Report
from uptide.enums import OutcomeStatus
from uptide.exceptions import NonZeroExitError, SkipStep
from uptide.utils.terminal import print_separator

log = structlog.get_logger(__name__)

StepFunc = Callable[[ExecutionContext], Awaitable[Outcome | None]]


@dataclass(frozen=True)
class Step:
    """An independently invocable update unit.

    Attributes:
        name: Identifier used in configuration and on the command line
        title: Human-readable label shown in separators and the summary
        func: Async step body
        accepted_codes: Non-zero exit codes classified as IGNORED
    """

    name: str
    title: str
    func: StepFunc
    accepted_codes: frozenset[int] = field(default_factory=frozenset)


class StepRunner:
    """Run steps in order and collect their outcomes in a Report."""

    def __init__(self, ctx: ExecutionContext, report: Report | None = None) -> None:
        self.ctx = ctx
        self.report = report if report is not None else Report()

    def classify(self, step: Step, error: Exception) -> Outcome:
        """Map an error raised by ``step`` to an Outcome."""
        if isinstance(error, SkipStep):
            return Outcome.skipped(error.reason)

        accepted = step.accepted_codes | self.ctx.settings.accepted_codes_for(step.name)
        if isinstance(error, NonZeroExitError) and error.returncode in accepted:
            return Outcome.ignored(error)

        return Outcome.failed(error)

    async def run(self, step: Step) -> Outcome:
        """Run one step and record its outcome."""
        print_separator(step.title)
        log.info("step_started", step=step.name, run_type=str(self.ctx.run_type))

        try:
            result = await step.func(self.ctx)
        except Exception as e:
            outcome = self.classify(step, e)
        else:
            outcome = result if result is not None else Outcome.success()

        if outcome.status is OutcomeStatus.FAILED:
            log.error("step_failed", step=step.name, error=outcome.describe())
            log.debug("step_failure_traceback", step=step.name, exc_info=outcome.error)
        elif outcome.status is OutcomeStatus.SKIPPED:
            log.debug("step_skipped", step=step.name, reason=outcome.reason)
        else:
            log.info("step_finished", step=step.name, status=str(outcome.status))

        self.report.record(step.name, step.title, outcome)
        return outcome

    async def run_all(self, steps: Iterable[Step]) -> Report:
        """Run every step in order. One failure never stops the others."""
        for step in steps:
            await self.run(step)
        return self.report
