from __future__ import annotations


class RoamError(Exception):
    """Base class for failures surfaced to callers of the event assistant."""


class ExtractionFailure(RoamError):
    """Raised when the extraction client is unreachable or returns malformed output.

    The turn is aborted; the caller's draft is left untouched so the user can retry.
    """


class ValidationFailure(RoamError):
    """Raised when a draft is published while mandatory fields are still missing."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = list(missing or [])


class PersistenceFailure(RoamError):
    """Raised when the event store rejects a write."""
