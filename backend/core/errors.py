"""Typed failures raised by the social graph core.

Every failure carries one :class:`ErrorKind`. Store errors are classified once
where they originate and travel up unchanged; only the HTTP layer turns a kind
into a status code.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION_ERROR"
    BUSINESS = "BUSINESS_ERROR"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    DATABASE = "DATABASE_ERROR"


class GraphError(Exception):
    """Base class for social graph failures."""

    kind: ErrorKind = ErrorKind.DATABASE
    message: str = "Database operation failed"

    def __init__(self, message: str | None = None, *, details: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.kind.value}: {self.message} ({self.details})"
        return f"{self.kind.value}: {self.message}"


class ValidationError(GraphError):
    kind = ErrorKind.VALIDATION
    message = "Invalid input provided"


class BusinessRuleError(GraphError):
    kind = ErrorKind.BUSINESS
    message = "Business rule violated"


class UserNotFoundError(GraphError):
    kind = ErrorKind.NOT_FOUND
    message = "User not found"


class BlockedError(GraphError):
    kind = ErrorKind.FORBIDDEN
    message = "Cannot perform action on blocked user"


class ConflictError(GraphError):
    kind = ErrorKind.CONFLICT
    message = "Resource already exists"


class DatabaseError(GraphError):
    kind = ErrorKind.DATABASE
    message = "Database operation failed"


__all__ = [
    "ErrorKind",
    "GraphError",
    "ValidationError",
    "BusinessRuleError",
    "UserNotFoundError",
    "BlockedError",
    "ConflictError",
    "DatabaseError",
]
