"""Errors raised while loading tagdir configuration."""


class ConfigError(Exception):
    """Raised when a configuration file or override cannot be parsed or validated."""
