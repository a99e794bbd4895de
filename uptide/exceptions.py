"""Custom exception hierarchy for the uptide update orchestrator.

This module defines the errors raised by the execution engine. The step
runner and the multi-pull loop convert them into classified outcomes, so a
single failing tool never aborts the rest of a run.

Exception Hierarchy:
    UptideError (base)
    ├── ConfigurationError
    ├── SkipStep
    │   └── RequirementMissing
    ├── CommandError
    │   ├── SpawnError
    │   ├── NonZeroExitError
    │   └── OutputDecodeError
    ├── DiscoveryError
    └── MultiPullError

Example Usage:
    >>> from uptide.exceptions import RequirementMissing
    >>> try:
    ...     resolver.require("antibody")
    ... except RequirementMissing as e:
    ...     print(e.reason)
    antibody is not installed
"""

from collections.abc import Mapping, Sequence


class UptideError(Exception):
    """Base exception for all uptide errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(UptideError):
    """Configuration-related errors.

    Raised when the configuration file is invalid or when the execution
    context cannot be built (for example the home directory is unknown).
    These errors are fatal to the whole run.
    """

    pass


class SkipStep(UptideError):
    """A step is not applicable on this machine.

    Raising this from a step body marks the step as skipped. It is an
    expected condition and is never reported as a failure.

    Attributes:
        reason: Why the step does not apply
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class RequirementMissing(SkipStep):
    """An external program or path a step depends on is absent."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} is not installed")


class CommandError(UptideError):
    """Base class for failures of an external command.

    Attributes:
        message: Human-readable error description
        program: Program that was (or would have been) executed
        arguments: Arguments passed to the program
    """

    def __init__(self, message: str, program: str, args: Sequence[str] = ()) -> None:
        self.program = program
        self.arguments = list(args)
        super().__init__(message)


class SpawnError(CommandError):
    """The program could not be launched (not found, permission denied)."""

    pass


class NonZeroExitError(CommandError):
    """The program ran but exited with an unexpected status.

    Attributes:
        returncode: Process exit code
        stderr: Captured standard error, empty when output was not captured
    """

    def __init__(
        self,
        program: str,
        args: Sequence[str],
        returncode: int,
        stderr: str = "",
    ) -> None:
        self.returncode = returncode
        self.stderr = stderr

        message = f"{program} exited with code {returncode}"
        detail = stderr.strip()
        if detail:
            message = f"{message}: {detail.splitlines()[-1]}"

        super().__init__(message, program, args)


class OutputDecodeError(CommandError):
    """Captured output was required as text but is not valid UTF-8."""

    pass


class DiscoveryError(UptideError):
    """A directory could not be read while discovering repositories.

    Attributes:
        path: Directory that could not be traversed
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class MultiPullError(UptideError):
    """One or more repositories failed to update during a multi-pull.

    Attributes:
        failures: Mapping of repository path to error description
    """

    def __init__(self, failures: Mapping[str, str]) -> None:
        self.failures = dict(failures)
        names = ", ".join(sorted(self.failures))
        super().__init__(f"Failed to pull {len(self.failures)} repositories: {names}")
