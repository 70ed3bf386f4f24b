"""
Unified error handling for the Infinispan exporter.

Every error raised by the exporter derives from ``ExporterError`` and
carries an exit code used by the CLI entry points.

Exit Codes:
- 0: Success
- 10: Configuration error
- 11: Management interface error (discovery or attribute read failure)
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    MANAGEMENT_ERROR = 11
    UNKNOWN_ERROR = 127


class ExporterError(Exception):
    """Base exception for exporter errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ExporterError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class ManagementError(ExporterError):
    """Raised when the management interface fails."""

    exit_code = ExitCode.MANAGEMENT_ERROR


class ManagementUnavailableError(ManagementError):
    """The management interface could not be reached."""


class ManagementProtocolError(ManagementError):
    """The management interface rejected a request or answered unexpectedly."""


class AttributeLookupError(ManagementError):
    """A resource vanished or does not expose the requested attribute."""


class DiscoveryError(ManagementError):
    """Resource discovery failed; the collection pass cannot proceed."""


class AttributeReadError(ManagementError):
    """Reading one statistic attribute of one resource failed."""

    def __init__(
        self,
        message: str,
        *,
        resource: str,
        attribute: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, {"resource": resource, "attribute": attribute, **(details or {})})
        self.resource = resource
        self.attribute = attribute


CommandFunc = TypeVar("CommandFunc", bound=Callable[..., int])

# SIGINT convention: 128 + signal number
INTERRUPTED = 130


def format_error_message(error: ExporterError) -> str:
    """Render an error and its details on one line, e.g. for stderr."""
    if not error.details:
        return error.message
    details = ", ".join(f"{key}={value}" for key, value in error.details.items())
    return f"{error.message} ({details})"


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[CommandFunc], CommandFunc]:
    """
    Turn an exception escaping a ``serve``, ``collect`` or ``check`` command
    into the process exit code.

    A ``ConfigurationError`` (bad YAML, invalid setting) exits with 10 and a
    ``ManagementError`` raised outside a collection pass, such as ``check``
    failing to reach Jolokia, exits with 11. Both are printed to stderr as a
    single line. Ctrl-C while serving exits with 130; anything else is an
    exporter bug and exits with 127.

    Args:
        show_traceback: Print the traceback for every error, not only for
            errors that request it
        log_errors: Also emit a ``command_failed`` log event
    """

    def decorator(func: CommandFunc) -> CommandFunc:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted", command=func.__name__)
                return INTERRUPTED
            except ExporterError as exc:
                exit_code = exc.exit_code
                print(f"error: {format_error_message(exc)}", file=sys.stderr)
                if log_errors:
                    logger.error(
                        "command_failed",
                        command=func.__name__,
                        error_type=type(exc).__name__,
                        error=exc.message,
                        exit_code=int(exit_code),
                        details=exc.details,
                    )
                if show_traceback or exc.show_traceback:
                    traceback.print_exc(file=sys.stderr)
            except Exception as exc:
                exit_code = ExitCode.UNKNOWN_ERROR
                if log_errors:
                    logger.error(
                        "command_failed",
                        command=func.__name__,
                        error_type=type(exc).__name__,
                        error=str(exc),
                        exit_code=int(exit_code),
                        exc_info=True,
                    )
                elif show_traceback:
                    traceback.print_exc(file=sys.stderr)
            return exit_code

        return wrapper  # type: ignore[return-value]

    return decorator
