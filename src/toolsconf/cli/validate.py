"""
Validate command.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from rich.markup import escape

from toolsconf.cli.ux import console, error, header, success
from toolsconf.config.resolver import ConfigResolver
from toolsconf.config.tools import ToolsConfig
from toolsconf.core.errors import ConfigSourceError, SchemaViolationError


def validate_command(
    resolver: ConfigResolver,
    schema_file: str,
    config_file: str = "",
    instance: str = "",
    sections: Sequence[str] = (),
) -> int:
    """
    Validate the config file against a JSON schema.

    Args:
        resolver: Supplies the default config file search path
        schema_file: Path to the JSON schema
        config_file: Explicit config file; searched for when empty
        instance: Validate only the sections of this instance
        sections: Validate only these sections

    Returns:
        Exit code (0 = valid)
    """
    schema_path = Path(schema_file)
    try:
        schema = schema_path.read_text()
    except OSError as e:
        raise ConfigSourceError(
            "unable to read config schema", details={"schema": str(schema_path)}
        ) from e

    path = resolver.locate_config(config_file)
    if path is None:
        raise ConfigSourceError(
            "no config file found",
            details={"config_dirs": [str(d) for d in resolver.config_dirs]},
        )

    header("Validate Config File")
    console.print(f"[info]Config file:[/info] {escape(str(path))}")
    if instance:
        console.print(f"[info]Instance:[/info] {escape(instance)}")
    console.print()

    config = ToolsConfig(resolver.new_loader(path), sections=sections, instance=instance)

    try:
        config.validate_config(schema)
    except SchemaViolationError as e:
        error("Invalid config file")
        console.print()
        console.print("[bold]Errors:[/bold]")
        for violation in e.violations:
            error(violation)
        console.print()
        return e.exit_code

    success("Valid config file")
    console.print()
    return 0
