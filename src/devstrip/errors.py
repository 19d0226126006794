"""Exceptions raised by devstrip."""


class DevstripError(Exception):
    """Base class for devstrip errors."""


class ConfigError(DevstripError):
    """Invalid scan configuration. Raised before any traversal begins."""
