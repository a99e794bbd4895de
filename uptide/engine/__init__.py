"""Execution engine.

This package provides the core of the orchestrator:

Key Components:
    - RequirementResolver: Memoized lookup of external programs
    - CommandExecutor: Runs commands, or traces them in dry-run mode
    - ExecutionContext: Read-only bundle passed to every step
    - StepRunner: Runs steps in order, isolating failures
    - Report: Ordered outcomes of a run

Example:
    >>> from uptide.engine import ExecutionContext, StepRunner
    >>> ctx = ExecutionContext.create(settings)
    >>> report = await StepRunner(ctx).run_all(steps)
    >>> report.exit_code
    0
"""

from uptide.engine.context import ExecutionContext
from uptide.engine.executor import CommandExecutor, CommandResult
from uptide.engine.outcome import Outcome, Report, ReportEntry
from uptide.engine.requirements import RequirementResolver
from uptide.engine.runner import Step, StepRunner

__all__ = [
    "CommandExecutor",
    "CommandResult",
    "ExecutionContext",
    "Outcome",
    "Report",
    "ReportEntry",
    "RequirementResolver",
    "Step",
    "StepRunner",
]
