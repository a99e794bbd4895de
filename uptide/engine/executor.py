"""Dual-mode command execution.

The CommandExecutor runs external programs for real in EXECUTE mode and only
prints what it would have run in DRY_RUN mode. Every step goes through it, so
a dry run previews the whole update without touching the system.

Two variants mirror how steps use external tools:
    - status_checked: output goes straight to the terminal, only the exit
      status matters
    - output_checked: stdout and stderr are captured and decoded as UTF-8

Both raise a CommandError subclass on failure:
    - SpawnError: the program could not be launched
    - NonZeroExitError: exit status not 0 and not in ``accepted_codes``
    - OutputDecodeError: captured output is not valid UTF-8

Example:
    >>> executor = CommandExecutor(RunType.EXECUTE)
    >>> result = await executor.output_checked("git", "rev-parse", "HEAD", cwd=repo)
    >>> result.stdout.strip()
    '3f2a...'

Thread Safety:
    Executors hold no mutable state and can be used concurrently from
    multiple async tasks. Each call spawns an independent subprocess.
"""

import asyncio
import os
import shlex
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import click
import structlog

from uptide.enums import RunType
from uptide.exceptions import NonZeroExitError, OutputDecodeError, SpawnError

log = structlog.get_logger(__name__)


def describe_command(
    program: str | Path,
    args: tuple[str, ...] | list[str],
    env: Mapping[str, str] | None = None,
) -> str:
    """Render a command line the way a user would type it in a shell."""
    parts = [f"{key}={shlex.quote(str(value))}" for key, value in (env or {}).items()]
    parts.append(shlex.quote(str(program)))
    parts.extend(shlex.quote(str(arg)) for arg in args)
    return " ".join(parts)


@dataclass(frozen=True)
class CommandResult:
    """Result of a command run (or traced) by the executor.

    Attributes:
        program: Program that was run
        args: Arguments passed to the program
        env: Environment overrides applied on top of the process environment
        returncode: Exit status, 0 for dry runs
        stdout: Captured standard output (empty unless captured)
        stderr: Captured standard error (empty unless captured)
        dry_run: True when the command was only traced
    """

    program: str
    args: tuple[str, ...]
    env: dict[str, str] = field(default_factory=dict)
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    dry_run: bool = False

    @property
    def command_line(self) -> str:
        return describe_command(self.program, self.args, self.env)


class CommandExecutor:
    """Run external programs, or trace them in dry-run mode.

    Attributes:
        run_type: Whether commands are spawned or only traced
    """

    def __init__(self, run_type: RunType) -> None:
        self.run_type = run_type

    async def status_checked(
        self,
        program: str | Path,
        *args: str | Path,
        env: Mapping[str, str] | None = None,
        cwd: str | Path | None = None,
        accepted_codes: Collection[int] = (),
    ) -> CommandResult:
        """Run a command with inherited output and check its exit status.

        Args:
            program: Program name or path
            *args: Arguments for the program
            env: Environment overrides merged over the current environment
            cwd: Working directory for the process
            accepted_codes: Non-zero exit codes that still count as success

        Returns:
            CommandResult without captured output

        Raises:
            SpawnError: If the program could not be started
            NonZeroExitError: If the exit status is not accepted
        """
        return await self._run(program, args, env, cwd, accepted_codes, capture=False)

    async def output_checked(
        self,
        program: str | Path,
        *args: str | Path,
        env: Mapping[str, str] | None = None,
        cwd: str | Path | None = None,
        accepted_codes: Collection[int] = (),
    ) -> CommandResult:
        """Run a command, capturing stdout and stderr as UTF-8 text.

        Raises:
            SpawnError: If the program could not be started
            NonZeroExitError: If the exit status is not accepted
            OutputDecodeError: If the output is not valid UTF-8
        """
        return await self._run(program, args, env, cwd, accepted_codes, capture=True)

    async def _run(
        self,
        program: str | Path,
        args: tuple[str | Path, ...],
        env: Mapping[str, str] | None,
        cwd: str | Path | None,
        accepted_codes: Collection[int],
        capture: bool,
    ) -> CommandResult:
        program_str = str(program)
        arg_list = tuple(str(arg) for arg in args)
        overrides = {key: str(value) for key, value in (env or {}).items()}

        if self.run_type.is_dry_run:
            result = CommandResult(program_str, arg_list, overrides, dry_run=True)
            click.echo(f"Dry running: {result.command_line}")
            log.info("dry_run_command", command=result.command_line, cwd=str(cwd) if cwd else None)
            return result

        log.debug("command_started", program=program_str, args=arg_list, cwd=str(cwd) if cwd else None)

        try:
            process = await asyncio.create_subprocess_exec(
                program_str,
                *arg_list,
                cwd=cwd,
                env={**os.environ, **overrides} if overrides else None,
                stdout=asyncio.subprocess.PIPE if capture else None,
                stderr=asyncio.subprocess.PIPE if capture else None,
            )
        except OSError as e:
            raise SpawnError(f"Failed to execute {program_str}: {e}", program_str, arg_list) from e

        stdout_bytes, stderr_bytes = await process.communicate()
        returncode = process.returncode if process.returncode is not None else 0

        try:
            stdout = (stdout_bytes or b"").decode("utf-8")
            stderr = (stderr_bytes or b"").decode("utf-8")
        except UnicodeDecodeError as e:
            raise OutputDecodeError(
                f"{program_str} produced output that is not valid UTF-8",
                program_str,
                arg_list,
            ) from e

        if returncode != 0 and returncode not in accepted_codes:
            log.debug("command_failed", program=program_str, returncode=returncode)
            raise NonZeroExitError(program_str, arg_list, returncode, stderr)

        return CommandResult(program_str, arg_list, overrides, returncode, stdout, stderr)
