"""
CLI commands for toolsconf.
"""

from toolsconf.cli.resolve import resolve_command
from toolsconf.cli.validate import validate_command

__all__ = [
    "resolve_command",
    "validate_command",
]
