"""Error taxonomy for upstream source failures."""

from __future__ import annotations


class SourceError(Exception):
    """Base class for any failure of a single upstream source."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(SourceError):
    """A required setting (usually a credential) is missing."""


class UpstreamError(SourceError):
    """The upstream answered with a non-success status or could not be reached.

    ``status_code`` is None when no HTTP response was received at all.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DataShapeError(SourceError):
    """A successful response is missing the fields we need."""


class SourceTimeoutError(SourceError, TimeoutError):
    """The upstream did not answer within the configured timeout."""
