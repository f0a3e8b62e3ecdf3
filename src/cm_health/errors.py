from __future__ import annotations


class HealthCheckError(Exception):
    """Base class for all errors raised by cm-health."""


class ConfigError(HealthCheckError):
    """Invalid settings or threshold overrides."""


class SiteConnectionError(HealthCheckError):
    """The management connection could not be established. Fatal for a run."""


class QueryError(HealthCheckError):
    """A single remote query failed."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class NoDataError(QueryError):
    """The remote system answered but returned nothing to measure."""


class RenderError(HealthCheckError):
    """The report could not be rendered."""
