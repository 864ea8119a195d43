"""
Unified error types for slokeeper.

Every failure surfaced to the host framework is a ``SloKeeperError``
subclass carrying the exit code an embedding command should return:

- 0: Success
- 10: Configuration error (ConfigurationError)
- 11: Provider error (NotFoundError, ConflictError, TransportError, StateWriteFailed)
- 12: Validation error (ValidationError)
- 127: Unknown/internal error
- 130: Interrupted (OperationCancelled, KeyboardInterrupt)
"""

from __future__ import annotations

import asyncio
import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for commands embedding the provider."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    VALIDATION_ERROR = 12
    UNKNOWN_ERROR = 127
    INTERRUPTED = 130


class SloKeeperError(Exception):
    """Base exception for slokeeper errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False
    retryable: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(SloKeeperError):
    """Raised for provider configuration errors."""

    exit_code = ExitCode.CONFIG_ERROR


class ValidationError(SloKeeperError):
    """Raised when a configuration value violates the schema or a cross-field rule."""

    exit_code = ExitCode.VALIDATION_ERROR

    def __init__(
        self,
        path: str,
        message: str,
        *,
        code: str = "Invalid",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(f"{path}: {message}", details)
        self.path = path
        self.code = code


class NotFoundError(SloKeeperError):
    """Raised when the server reports that a resource does not exist."""

    exit_code = ExitCode.PROVIDER_ERROR

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} '{identifier}' not found", {"id": identifier})
        self.resource = resource
        self.identifier = identifier


class ConflictError(SloKeeperError):
    """Raised on optimistic-concurrency failures; re-read before retrying."""

    exit_code = ExitCode.PROVIDER_ERROR
    retryable = True


class TransportError(SloKeeperError):
    """Raised for network failures and unexpected server responses."""

    exit_code = ExitCode.PROVIDER_ERROR

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class StateWriteFailed(SloKeeperError):
    """Raised when the host framework rejects a value written back to the handle."""

    exit_code = ExitCode.PROVIDER_ERROR

    def __init__(self, field: str, cause: Exception):
        super().__init__(f"error setting field '{field}': {cause}", {"field": field})
        self.field = field


class OperationCancelled(SloKeeperError, asyncio.CancelledError):
    """Raised when the awaiting task is cancelled during an in-flight request.

    Also a ``CancelledError``, so ``asyncio.timeout`` and task groups still
    recognise their own cancellation.
    """

    exit_code = ExitCode.INTERRUPTED


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for command entry points driving the provider.

    Catches exceptions and converts them to exit codes with consistent
    error reporting.

    Args:
        show_traceback: If True, show full traceback for unexpected errors
        log_errors: If True, log errors to structlog

    Usage:
        @main_with_error_handling()
        def reconcile() -> int:
            asyncio.run(resource.create(state))
            return 0

    Exit codes:
        - SloKeeperError subclasses: the error's exit_code
        - KeyboardInterrupt: 130
        - Other exceptions: 127
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except SloKeeperError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return ExitCode.INTERRUPTED
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.UNKNOWN_ERROR,
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: SloKeeperError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
