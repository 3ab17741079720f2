"""Core configuration, logging and error types."""

from .config import Settings, get_settings, settings
from .errors import (
    BlockedError,
    BusinessRuleError,
    ConflictError,
    DatabaseError,
    ErrorKind,
    GraphError,
    UserNotFoundError,
    ValidationError,
)
from .logging_config import generate_request_id, request_id_var, setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "ErrorKind",
    "GraphError",
    "ValidationError",
    "BusinessRuleError",
    "UserNotFoundError",
    "BlockedError",
    "ConflictError",
    "DatabaseError",
    "setup_logging",
    "generate_request_id",
    "request_id_var",
]
