"""Error types surfaced by the scheduling services."""

from __future__ import annotations


class ScheduleValidationError(ValueError):
    """A request field is missing or malformed. Maps to HTTP 400."""

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or message


class ExternalServiceError(RuntimeError):
    """A chat or travel-time call failed or returned unusable content. Maps to HTTP 500."""

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or message
