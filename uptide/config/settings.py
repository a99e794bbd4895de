"""
Configuration system using Pydantic for type-safe settings management.

Settings come from, in increasing priority: defaults, the YAML config file,
``UPTIDE_*`` environment variables, and finally command-line flags applied
by the driver.
"""

from __future__ import annotations

import os
import re
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from uptide.exceptions import ConfigurationError

if TYPE_CHECKING:
    from uptide.engine.runner import Step
    from uptide.utils.paths import BaseDirs

CONFIG_FILE_NAME = "config.yaml"


def _default_concurrency() -> int:
    return min(os.cpu_count() or 1, 8)


class GitConfig(BaseModel):
    """Settings for discovering and bulk-updating plugin repositories."""

    max_concurrency: int = Field(
        default_factory=_default_concurrency,
        ge=1,
        le=32,
        description="Maximum number of concurrent git pulls",
    )
    pull_arguments: list[str] = Field(
        default_factory=lambda: ["--ff-only"],
        description="Extra arguments passed to git pull",
    )
    discovery_depth: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Directory levels searched below a plugin root",
    )


class UptideSettings(BaseSettings):
    """Main orchestrator settings.

    This class combines all configuration sections and provides methods
    for loading from YAML files with environment variable interpolation.
    """

    model_config = SettingsConfigDict(
        env_prefix="UPTIDE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    dry_run: bool = Field(default=False, description="Print commands instead of running them")
    log_level: str = Field(default="WARNING", description="Minimum log level")
    log_format: Literal["console", "json"] = Field(default="console", description="Log renderer")
    disable: list[str] = Field(default_factory=list, description="Steps never run")
    only: list[str] = Field(default_factory=list, description="If set, run only these steps")
    accepted_exit_codes: dict[str, list[int]] = Field(
        default_factory=dict,
        description="Extra non-zero exit codes treated as ignored, per step",
    )
    git: GitConfig = Field(default_factory=GitConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def load(cls, config_path: str | Path | None, base_dirs: BaseDirs) -> UptideSettings:
        """Load settings from an explicit file or the default location.

        The default location is ``<config_dir>/uptide/config.yaml``. When no
        explicit file is given and the default does not exist, defaults (and
        environment variables) are used.

        Raises:
            ConfigurationError: If an explicit file is missing or any file is invalid
        """
        if config_path is not None:
            return cls.from_yaml(str(config_path))

        default_path = base_dirs.config_dir / "uptide" / CONFIG_FILE_NAME
        if default_path.exists():
            return cls.from_yaml(str(default_path))

        try:
            return cls()
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @classmethod
    def from_yaml(cls, config_path: str) -> UptideSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} syntax for environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            UptideSettings instance

        Raises:
            ConfigurationError: If config file is invalid or missing required fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            yaml_content = config_file.read_text()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        # An empty file means "all defaults"
        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        Supports two syntaxes:
        - ${VAR_NAME} - Required environment variable (raises if not set)
        - ${VAR_NAME:-default} - Optional with default value

        YAML comment lines (starting with #) are preserved unchanged.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))

    def select_steps(self, steps: Sequence[Step]) -> list[Step]:
        """Apply ``only`` and ``disable`` to the ordered step list.

        Raises:
            ConfigurationError: If a step name in either list is unknown
        """
        known = {step.name for step in steps}
        unknown = sorted((set(self.only) | set(self.disable)) - known)
        if unknown:
            raise ConfigurationError(f"Unknown step(s): {', '.join(unknown)}")

        selected = [step for step in steps if step.name not in self.disable]
        if self.only:
            selected = [step for step in selected if step.name in self.only]
        return selected

    def accepted_codes_for(self, step_name: str) -> frozenset[int]:
        """Configured extra accepted exit codes for ``step_name``."""
        return frozenset(self.accepted_exit_codes.get(step_name, ()))
