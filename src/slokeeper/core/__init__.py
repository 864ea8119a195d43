"""Core modules for slokeeper - centralized error definitions."""

from slokeeper.core.errors import (
    ConfigurationError,
    ConflictError,
    ExitCode,
    NotFoundError,
    OperationCancelled,
    SloKeeperError,
    StateWriteFailed,
    TransportError,
    ValidationError,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "SloKeeperError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "TransportError",
    "StateWriteFailed",
    "OperationCancelled",
    "format_error_message",
    "main_with_error_handling",
]
