"""
Unified error handling for toolsconf.

Every failure the library surfaces is a ToolsConfError subclass carrying a
message, optional details and an exit code the CLI layer can use.

Exit Codes:
- 0: Success
- 10: Configuration error (config source, format, secrets, TLS material)
- 12: Validation error (endpoint syntax, schema violations, flag values)
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
    VALIDATION_ERROR = 12
    UNKNOWN_ERROR = 127


class ToolsConfError(Exception):
    """Base exception for toolsconf errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ToolsConfError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class ValidationError(ToolsConfError):
    """Raised for validation failures."""

    exit_code = ExitCode.VALIDATION_ERROR


class ConfigSourceError(ConfigurationError):
    """Every config getter failed."""


class ConfigFormatError(ConfigurationError):
    """Every config unmarshaller rejected the config data."""


class SecretUnresolvedError(ConfigurationError):
    """A secret reference could not be resolved."""


class TLSMaterialError(ConfigurationError):
    """Certificate or key material could not be turned into a TLS identity."""


class EndpointSyntaxError(ValidationError, ValueError):
    """An endpoint token does not follow host[:tls-name][:port]."""


class SchemaViolationError(ValidationError):
    """The resolved config violates one or more JSON schema rules."""

    def __init__(self, message: str, violations: list[str] | None = None):
        self.violations = list(violations or [])
        super().__init__(message, {"violations": len(self.violations)})

    def __str__(self) -> str:
        if not self.violations:
            return self.message
        lines = [self.message] + [f"- {v}" for v in self.violations]
        return "\n".join(lines)


class FlagValueError(ValidationError):
    """One or more flags rejected the value taken from the config."""

    def __init__(self, message: str, errors: dict[str, Exception] | None = None):
        self.errors = dict(errors or {})
        super().__init__(message, {"flags": ",".join(self.errors)})


F = TypeVar("F", bound=Callable[..., int])

INTERRUPTED = 130


def _report(error: BaseException, exit_code: int, log_errors: bool, traceback_on: bool) -> None:
    if log_errors:
        details = error.details if isinstance(error, ToolsConfError) else {}
        logger.error(
            "command_failed",
            error_type=type(error).__name__,
            exit_code=int(exit_code),
            **details,
        )
    if isinstance(error, ToolsConfError):
        print(format_error_message(error), file=sys.stderr)
    else:
        print(f"unexpected error: {error}", file=sys.stderr)
    if traceback_on:
        traceback.print_exc(file=sys.stderr)


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Wrap a CLI entry point so toolsconf errors become exit codes.

    ToolsConfError subclasses exit with their own exit_code, Ctrl-C exits
    with 130 and anything else with UNKNOWN_ERROR. The error and its cause
    chain are printed to stderr.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except ToolsConfError as e:
                _report(e, e.exit_code, log_errors, e.show_traceback or show_traceback)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return INTERRUPTED
            except Exception as e:
                _report(e, ExitCode.UNKNOWN_ERROR, log_errors, show_traceback)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: ToolsConfError) -> str:
    """Render error followed by its __cause__ chain, colon separated."""
    msg = str(error)
    cause = error.__cause__
    while cause is not None:
        msg = f"{msg}: {cause}"
        cause = cause.__cause__
    return msg
