"""Tests for uptide.engine.executor."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from uptide.engine.executor import CommandExecutor, CommandResult, describe_command
from uptide.enums import RunType
from uptide.exceptions import NonZeroExitError, OutputDecodeError, SpawnError


@pytest.fixture
def executor() -> CommandExecutor:
    return CommandExecutor(RunType.EXECUTE)


@pytest.fixture
def dry_executor() -> CommandExecutor:
    return CommandExecutor(RunType.DRY_RUN)


class TestDescribeCommand:
    """Tests for command line rendering."""

    def test_plain_command(self):
        assert describe_command("git", ["pull", "--ff-only"]) == "git pull --ff-only"

    def test_quotes_arguments_with_spaces(self):
        assert describe_command("zsh", ["-c", "zplug update"]) == "zsh -c 'zplug update'"

    def test_env_overrides_come_first(self):
        line = describe_command(Path("/bin/zsh"), ["upgrade.sh"], {"ZSH": "/home/me/.oh-my-zsh"})

        assert line == "ZSH=/home/me/.oh-my-zsh /bin/zsh upgrade.sh"

    def test_command_result_renders_command_line(self):
        result = CommandResult("antibody", ("update",))

        assert result.command_line == "antibody update"


class TestExecuteMode:
    """Commands are spawned in EXECUTE mode."""

    @pytest.mark.asyncio
    async def test_status_checked_success(self, executor, make_tool):
        tool = make_tool("ok", "exit 0")

        result = await executor.status_checked(tool)

        assert result.returncode == 0
        assert result.dry_run is False
        assert result.stdout == ""

    @pytest.mark.asyncio
    async def test_status_checked_non_zero_raises(self, executor, make_tool):
        tool = make_tool("fails", "exit 3")

        with pytest.raises(NonZeroExitError) as exc_info:
            await executor.status_checked(tool, "--flag")

        assert exc_info.value.returncode == 3
        assert exc_info.value.arguments == ["--flag"]

    @pytest.mark.asyncio
    async def test_accepted_code_is_success(self, executor, make_tool):
        tool = make_tool("restart", "exit 80")

        result = await executor.status_checked(tool, accepted_codes=[80])

        assert result.returncode == 80

    @pytest.mark.asyncio
    async def test_other_code_with_accepted_set_still_fails(self, executor, make_tool):
        tool = make_tool("broken", "exit 1")

        with pytest.raises(NonZeroExitError):
            await executor.status_checked(tool, accepted_codes=[80])

    @pytest.mark.asyncio
    async def test_output_checked_captures_text(self, executor, make_tool):
        tool = make_tool("talk", 'echo "hello $1"; echo oops >&2')

        result = await executor.output_checked(tool, "world")

        assert result.stdout == "hello world\n"
        assert result.stderr == "oops\n"

    @pytest.mark.asyncio
    async def test_output_checked_failure_carries_stderr(self, executor, make_tool):
        tool = make_tool("noisy", "echo 'fatal: no upstream' >&2; exit 1")

        with pytest.raises(NonZeroExitError) as exc_info:
            await executor.output_checked(tool)

        assert "fatal: no upstream" in exc_info.value.stderr
        assert "fatal: no upstream" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_output_checked_rejects_invalid_utf8(self, executor, make_tool):
        tool = make_tool("binary", "printf '\\377\\376'")

        with pytest.raises(OutputDecodeError):
            await executor.output_checked(tool)

    @pytest.mark.asyncio
    async def test_env_overrides_reach_the_process(self, executor, make_tool):
        tool = make_tool("env", 'printf "%s" "$ZSH"')

        result = await executor.output_checked(tool, env={"ZSH": "/opt/omz"})

        assert result.stdout == "/opt/omz"
        assert result.env == {"ZSH": "/opt/omz"}

    @pytest.mark.asyncio
    async def test_cwd_is_applied(self, executor, make_tool, tmp_path: Path):
        tool = make_tool("where", "pwd")

        result = await executor.output_checked(tool, cwd=tmp_path)

        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    @pytest.mark.asyncio
    async def test_missing_program_is_spawn_error(self, executor, tmp_path: Path):
        with pytest.raises(SpawnError) as exc_info:
            await executor.status_checked(tmp_path / "does-not-exist")

        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_non_executable_is_spawn_error(self, executor, tmp_path: Path):
        script = tmp_path / "script"
        script.write_text("#!/bin/sh\nexit 0\n")
        script.chmod(0o644)

        with pytest.raises(SpawnError):
            await executor.status_checked(script)


class TestDryRunMode:
    """Nothing is spawned in DRY_RUN mode."""

    @pytest.mark.asyncio
    async def test_no_process_is_spawned(self, dry_executor):
        with patch(
            "uptide.engine.executor.asyncio.create_subprocess_exec", new_callable=AsyncMock
        ) as spawn:
            await dry_executor.status_checked("zsh", "-c", "zplug update")
            await dry_executor.output_checked("git", "pull")

        spawn.assert_not_called()

    @pytest.mark.asyncio
    async def test_result_is_successful_trace(self, dry_executor):
        result = await dry_executor.status_checked("antibody", "update")

        assert result.dry_run is True
        assert result.returncode == 0
        assert result.command_line == "antibody update"

    @pytest.mark.asyncio
    async def test_trace_is_printed(self, dry_executor, capsys):
        await dry_executor.status_checked("zsh", "upgrade.sh", env={"ZSH": "/omz"})

        assert "Dry running: ZSH=/omz zsh upgrade.sh" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_missing_program_is_not_an_error(self, dry_executor, tmp_path: Path):
        result = await dry_executor.status_checked(tmp_path / "nope")

        assert result.dry_run is True
