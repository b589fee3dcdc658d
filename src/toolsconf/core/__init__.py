"""Core modules for toolsconf - centralized error definitions."""

from toolsconf.core.errors import (
    ConfigFormatError,
    ConfigSourceError,
    ConfigurationError,
    EndpointSyntaxError,
    ExitCode,
    FlagValueError,
    SchemaViolationError,
    SecretUnresolvedError,
    TLSMaterialError,
    ToolsConfError,
    ValidationError,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "ToolsConfError",
    "ConfigurationError",
    "ValidationError",
    "ConfigSourceError",
    "ConfigFormatError",
    "SecretUnresolvedError",
    "TLSMaterialError",
    "EndpointSyntaxError",
    "SchemaViolationError",
    "FlagValueError",
    "main_with_error_handling",
    "format_error_message",
]
