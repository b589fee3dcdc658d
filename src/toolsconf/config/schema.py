"""
JSON Schema validation of resolved config maps.
"""

from __future__ import annotations

import base64
import datetime
import json
from typing import Any

from jsonschema import exceptions as jsonschema_exceptions
from jsonschema.validators import validator_for

from toolsconf.core.errors import ConfigurationError, SchemaViolationError


def load_schema(schema: str | dict[str, Any]) -> dict[str, Any]:
    """Accept a schema as JSON text or as an already parsed mapping."""
    if isinstance(schema, dict):
        return schema
    try:
        return json.loads(schema)
    except json.JSONDecodeError as e:
        raise ConfigurationError("unable to parse config schema") from e


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, bytes):
        return base64.b64encode(value).decode()
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def to_json_data(data: dict[str, Any]) -> dict[str, Any]:
    """
    The config map as JSON would carry it.

    TOML and YAML datetimes become ISO 8601 strings and YAML binary values
    become base64 strings, so schema rules see what a JSON document holds.
    """
    return json.loads(json.dumps(data, default=_json_default))


def _location(error: jsonschema_exceptions.ValidationError) -> str:
    if not error.absolute_path:
        return "(root)"
    return ".".join(str(part) for part in error.absolute_path)


def schema_violations(data: dict[str, Any], schema: str | dict[str, Any]) -> list[str]:
    """Every rule data breaks, in document order."""
    parsed = load_schema(schema)
    validator_cls = validator_for(parsed)
    try:
        validator_cls.check_schema(parsed)
    except jsonschema_exceptions.SchemaError as e:
        raise ConfigurationError("unable to validate config schema") from e

    validator = validator_cls(parsed)
    errors = sorted(validator.iter_errors(to_json_data(data)), key=lambda e: e.json_path)
    return [f"{_location(e)}: {e.message}" for e in errors]


def validate_config_data(data: dict[str, Any], schema: str | dict[str, Any]) -> None:
    """
    Validate data against schema.

    Raises:
        SchemaViolationError: listing every violated rule
        ConfigurationError: the schema itself is unusable
    """
    violations = schema_violations(data, schema)
    if violations:
        raise SchemaViolationError("invalid config file", violations)


__all__ = ["load_schema", "schema_violations", "to_json_data", "validate_config_data"]
