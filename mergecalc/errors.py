"""Exceptions raised by data sources."""


class DataSourceError(RuntimeError):
    """A price or supply source could not produce a usable value."""
