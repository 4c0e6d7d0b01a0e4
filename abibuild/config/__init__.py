"""Run configuration for abibuild."""

from abibuild.config.settings import BuildSettings, resolve_settings

__all__ = ["BuildSettings", "resolve_settings"]
