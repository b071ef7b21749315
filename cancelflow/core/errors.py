# cancelflow/core/errors.py
from __future__ import annotations


class CancellationError(Exception):
    """Base of everything the cancellation service lets out."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail or self.__class__.__name__


class ValidationError(CancellationError):
    """Malformed or missing field, fixable by the caller."""

    status_code = 400
    code = "validation_error"


class NotFoundError(CancellationError):
    status_code = 404
    code = "not_found"


class PersistenceError(CancellationError):
    """Backing store failed. Not retried."""

    status_code = 500
    code = "persistence_error"


class UnexpectedError(CancellationError):
    status_code = 500
    code = "internal_error"


__all__ = [
    "CancellationError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "UnexpectedError",
]
