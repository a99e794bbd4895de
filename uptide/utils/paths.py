"""Base directory discovery and path resolution helpers."""

import os
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

import structlog

from uptide.exceptions import ConfigurationError

log = structlog.get_logger(__name__)

PathProbe = Callable[[], Awaitable[str | None]]


@dataclass(frozen=True)
class BaseDirs:
    """Per-user base directories.

    Attributes:
        home_dir: The user's home directory
        config_dir: XDG config directory (``~/.config`` by default)
        data_dir: XDG data directory (``~/.local/share`` by default)
    """

    home_dir: Path
    config_dir: Path
    data_dir: Path

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> "BaseDirs":
        """Build base directories from environment variables.

        Args:
            environ: Environment to read, defaults to ``os.environ``

        Returns:
            BaseDirs instance

        Raises:
            ConfigurationError: If the home directory cannot be determined
        """
        env = os.environ if environ is None else environ

        home = env.get("HOME")
        if not home:
            try:
                home = str(Path.home())
            except (KeyError, RuntimeError) as e:
                raise ConfigurationError("Cannot determine the home directory") from e

        home_dir = Path(home)
        config_dir = Path(env.get("XDG_CONFIG_HOME") or home_dir / ".config")
        data_dir = Path(env.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

        return cls(home_dir=home_dir, config_dir=config_dir, data_dir=data_dir)


async def resolve_path(
    explicit: str | None,
    probe: PathProbe | None,
    default: Path,
) -> Path:
    """Resolve a tool directory from an explicit value, a probe, or a default.

    The explicit value (usually an environment variable) wins. Otherwise the
    probe is awaited, for example asking a shell to print a variable set in
    its startup files. An empty or missing answer falls back to ``default``.

    Args:
        explicit: Explicitly configured path, or None
        probe: Async callable returning a path string or None
        default: Path used when neither source yields a value

    Returns:
        The resolved path
    """
    if explicit:
        return Path(explicit)

    if probe is not None:
        answer = await probe()
        if answer and answer.strip():
            return Path(answer.strip())

    log.debug("path_default_used", default=str(default))
    return default
