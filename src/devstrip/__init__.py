"""devstrip - find and remove stale developer build artifacts and caches."""

__version__ = "0.3.0"
