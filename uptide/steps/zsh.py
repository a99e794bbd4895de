"""Update steps for zsh plugin managers.

Each step checks its requirements first, so a manager that is not installed
is skipped before any command runs. Most managers are driven through a zsh
session that sources the user's ``.zshrc``; paths interpolated into those
``zsh -c`` scripts are shell-quoted.
"""

import shlex
from pathlib import Path

import click
import structlog

from uptide.engine.context import ExecutionContext
from uptide.exceptions import CommandError
from uptide.git.repositories import RepositorySet
from uptide.utils.paths import PathProbe, resolve_path

log = structlog.get_logger(__name__)

OH_MY_ZSH_RESTART_CODE = 80


def zdotdir(ctx: ExecutionContext) -> Path:
    """Directory holding the zsh startup files."""
    explicit = ctx.env("ZDOTDIR")
    return Path(explicit) if explicit else ctx.base_dirs.home_dir


def zshrc(ctx: ExecutionContext) -> Path:
    return zdotdir(ctx) / ".zshrc"


def zsh_variable_probe(ctx: ExecutionContext, zsh: Path, script: str) -> PathProbe:
    """Probe that asks zsh to print a variable defined in its startup files.

    A dry run never spawns a shell, so the probe answers None and the
    caller falls back to its default. A failing shell means the variable
    is unset.
    """

    async def probe() -> str | None:
        if ctx.is_dry_run:
            log.debug("zsh_probe_skipped", script=script)
            return None
        try:
            result = await ctx.probe.output_checked(zsh, "-c", script)
        except CommandError as e:
            log.debug("zsh_probe_failed", script=script, error=str(e))
            return None
        return result.stdout

    return probe


def _source(path: Path, commands: str) -> str:
    return f"source {shlex.quote(str(path))} && {commands}"


async def run_zr(ctx: ExecutionContext) -> None:
    zsh = ctx.requirements.require("zsh")
    ctx.requirements.require("zr")

    await ctx.executor.status_checked(zsh, "-l", "-c", _source(zshrc(ctx), "zr --update"))


async def run_antidote(ctx: ExecutionContext) -> None:
    zsh = ctx.requirements.require("zsh")
    antidote = ctx.requirements.require_path(zdotdir(ctx) / ".antidote") / "antidote.zsh"

    await ctx.executor.status_checked(zsh, "-c", _source(antidote, "antidote update"))


async def run_antibody(ctx: ExecutionContext) -> None:
    ctx.requirements.require("zsh")
    antibody = ctx.requirements.require("antibody")

    await ctx.executor.status_checked(antibody, "update")


async def run_antigen(ctx: ExecutionContext) -> None:
    zsh = ctx.requirements.require("zsh")
    rc = ctx.requirements.require_path(zshrc(ctx))
    home = await resolve_path(ctx.env("ADOTDIR"), None, ctx.base_dirs.home_dir / "antigen.zsh")
    ctx.requirements.require_path(home)

    script = _source(rc, "(antigen selfupdate ; antigen update)")
    await ctx.executor.status_checked(zsh, "-l", "-c", script)


async def run_zgenom(ctx: ExecutionContext) -> None:
    zsh = ctx.requirements.require("zsh")
    rc = ctx.requirements.require_path(zshrc(ctx))
    home = await resolve_path(ctx.env("ZGEN_SOURCE"), None, ctx.base_dirs.home_dir / ".zgenom")
    ctx.requirements.require_path(home)

    script = _source(rc, "zgenom selfupdate && zgenom update")
    await ctx.executor.status_checked(zsh, "-l", "-c", script)


async def run_zplug(ctx: ExecutionContext) -> None:
    zsh = ctx.requirements.require("zsh")
    ctx.requirements.require_path(zshrc(ctx))
    home = await resolve_path(ctx.env("ZPLUG_HOME"), None, ctx.base_dirs.home_dir / ".zplug")
    ctx.requirements.require_path(home)

    await ctx.executor.status_checked(zsh, "-i", "-c", "zplug update")


async def run_zinit(ctx: ExecutionContext) -> None:
    zsh = ctx.requirements.require("zsh")
    rc = ctx.requirements.require_path(zshrc(ctx))
    home = await resolve_path(ctx.env("ZINIT_HOME"), None, ctx.base_dirs.home_dir / ".zinit")
    ctx.requirements.require_path(home)

    script = _source(rc, "zinit self-update && zinit update --all")
    await ctx.executor.status_checked(zsh, "-i", "-c", script)


async def run_zi(ctx: ExecutionContext) -> None:
    zsh = ctx.requirements.require("zsh")
    rc = ctx.requirements.require_path(zshrc(ctx))
    ctx.requirements.require_path(ctx.base_dirs.home_dir / ".zi")

    script = _source(rc, "zi self-update && zi update --all")
    await ctx.executor.status_checked(zsh, "-i", "-c", script)


async def run_zim(ctx: ExecutionContext) -> None:
    zsh = ctx.requirements.require("zsh")
    probe = zsh_variable_probe(ctx, zsh, "[[ -n ${ZIM_HOME} ]] && print -n ${ZIM_HOME}")
    home = await resolve_path(ctx.env("ZIM_HOME"), probe, ctx.base_dirs.home_dir / ".zim")
    ctx.requirements.require_path(home)

    await ctx.executor.status_checked(zsh, "-i", "-c", "zimfw upgrade && zimfw update")


async def run_oh_my_zsh(ctx: ExecutionContext) -> None:
    """Update custom plugins and themes, then oh-my-zsh itself.

    The upgrade script exits with 80 when the shell must be restarted; the
    step declares that code as accepted.
    """
    zsh = ctx.requirements.require("zsh")
    oh_my_zsh = ctx.requirements.require_path(ctx.base_dirs.home_dir / ".oh-my-zsh")

    probe = zsh_variable_probe(ctx, zsh, "test $ZSH_CUSTOM && echo -n $ZSH_CUSTOM")
    default_custom_dir = oh_my_zsh / "custom"
    custom_dir = await resolve_path(ctx.env("ZSH_CUSTOM"), probe, default_custom_dir)
    log.debug("oh_my_zsh_custom_dir", path=str(custom_dir))
    if custom_dir != default_custom_dir and not custom_dir.is_dir():
        log.warning("oh_my_zsh_custom_dir_missing", path=str(custom_dir))

    custom_repos = RepositorySet()
    custom_repos.discover(custom_dir, ctx.git.config.discovery_depth)
    custom_repos.remove(oh_my_zsh)

    if custom_repos:
        click.echo("Pulling custom plugins and themes")
        summary = await ctx.git.multi_pull(custom_repos, ctx)
        summary.raise_for_failures()

    await ctx.executor.status_checked(
        zsh,
        oh_my_zsh / "tools" / "upgrade.sh",
        env={"ZSH": str(oh_my_zsh)},
    )
