"""Configuration loading and validation."""

from uptide.config.settings import GitConfig, UptideSettings

__all__ = ["GitConfig", "UptideSettings"]
