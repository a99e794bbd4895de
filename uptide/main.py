"""CLI entry point for the uptide update orchestrator."""

import asyncio
import sys
from pathlib import Path

import click
import structlog

from uptide.config.settings import UptideSettings
from uptide.engine.context import ExecutionContext
from uptide.engine.outcome import Report
from uptide.engine.runner import Step, StepRunner
from uptide.enums import RunType
from uptide.exceptions import UptideError
from uptide.steps import STEPS
from uptide.utils.logging_config import configure_logging
from uptide.utils.paths import BaseDirs
from uptide.utils.terminal import print_summary

log = structlog.get_logger(__name__)


@click.group()
@click.option(
    "--config",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: <config dir>/uptide/config.yaml)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Logging level",
)
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default=None,
    help="Log output format",
)
@click.pass_context
def cli(ctx: click.Context, config: Path | None, log_level: str | None, log_format: str | None) -> None:
    """uptide: update everything with one command."""
    try:
        base_dirs = BaseDirs.from_environment()
        settings = UptideSettings.load(config, base_dirs)
    except UptideError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    updates = {}
    if log_level:
        updates["log_level"] = log_level.upper()
    if log_format:
        updates["log_format"] = log_format
    if updates:
        settings = settings.model_copy(update=updates)

    configure_logging(settings.log_level, settings.log_format)
    ctx.obj = {"settings": settings, "base_dirs": base_dirs}


@cli.command()
@click.option("--dry-run", "-n", is_flag=True, default=False, help="Print commands without running them")
@click.option("--only", multiple=True, help="Run only this step (repeatable)")
@click.option("--disable", multiple=True, help="Do not run this step (repeatable)")
@click.pass_context
def run(ctx: click.Context, dry_run: bool, only: tuple[str, ...], disable: tuple[str, ...]) -> None:
    """Run every enabled update step."""
    settings: UptideSettings = ctx.obj["settings"]
    settings = settings.model_copy(
        update={
            "dry_run": settings.dry_run or dry_run,
            "only": list(only) or settings.only,
            "disable": [*settings.disable, *disable],
        }
    )

    try:
        steps = settings.select_steps(STEPS)
        context = ExecutionContext.create(
            settings,
            run_type=RunType.from_flag(settings.dry_run),
            base_dirs=ctx.obj["base_dirs"],
        )
        report = asyncio.run(_run_steps(context, steps))
    except UptideError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("run_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    print_summary(report)
    sys.exit(report.exit_code)


@cli.command("steps")
def list_steps() -> None:
    """List available steps in the order they run."""
    width = max(len(step.name) for step in STEPS)
    for step in STEPS:
        click.echo(f"{step.name.ljust(width)}  {step.title}")


async def _run_steps(context: ExecutionContext, steps: list[Step]) -> Report:
    """Run ``steps`` sequentially and return the report."""
    runner = StepRunner(context)
    return await runner.run_all(steps)


if __name__ == "__main__":
    cli()
