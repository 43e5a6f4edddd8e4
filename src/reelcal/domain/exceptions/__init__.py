"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so code can inspect it without parsing str(exception).
    # This is your base class - DON'T raise it directly! Always use a specific subclass so callers can
    # catch precisely (a skip is NOT the same thing as a missing source).
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


# =============================================================================
# Per-record failures
# These never abort a batch. Stages catch them, count them and move on.
# =============================================================================


class SkippableRecordError(DomainException):
    """A single candidate record is missing a required field.

    The record is dropped and a running counter is incremented; the batch
    continues. Required fields are the identity key, the watched date and
    the title.

    Example:
        raise SkippableRecordError("title")
    """

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"Candidate record is missing required field '{field}'")
        self.field = field


class InvalidInstantError(SkippableRecordError):
    """A date could not be parsed into an instant.

    Fatal for that single record only. It subclasses SkippableRecordError so
    the stages that already skip records handle it without extra branches.
    """

    def __init__(self, value: Any) -> None:
        super().__init__("date", f"Invalid instant: {value!r}")
        self.value = value


# =============================================================================
# Source-level failures
# =============================================================================


class SourceUnavailableError(DomainException):
    """An expected source batch is entirely absent.

    Raised when an export file is missing, the snapshot cannot be read or the
    live feed is unreachable. Callers log a warning and proceed with the
    remaining sources (graceful degradation, never fatal).
    """

    def __init__(self, source: str, message: str | None = None) -> None:
        super().__init__(message or f"Source '{source}' is unavailable")
        self.source = source


class EmptyTimelineError(DomainException):
    """Zero usable records survived from all sources.

    This is the one condition that surfaces as a hard failure to the caller.
    """

    pass


# =============================================================================
# Configuration and external services
# =============================================================================


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Example:
        raise ConfigurationError("Unknown civil timezone: Mars/Olympus")
    """

    pass


class ExternalServiceError(DomainException):
    """External service (TMDb, Letterboxd feed) returned an error."""

    pass


class RateLimitExceededError(ExternalServiceError):
    """External service rate limit was still exceeded after backing off.

    Example:
        raise RateLimitExceededError("TMDb rate limit exceeded - retry after 10s")
    """

    pass


__all__ = [
    "DomainException",
    "SkippableRecordError",
    "InvalidInstantError",
    "SourceUnavailableError",
    "EmptyTimelineError",
    "ConfigurationError",
    "ExternalServiceError",
    "RateLimitExceededError",
]
