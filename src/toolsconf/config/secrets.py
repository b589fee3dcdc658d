"""
Secret reference resolution.

A flag or config value may either be a literal or point somewhere else:

    env:VAR         value of environment variable VAR
    env-b64:VAR     base64 decoded value of environment variable VAR
    b64:DATA        base64 decoded DATA
    file:PATH       contents of PATH, minus one trailing newline

Callers pick which schemes are legal with a SecretFormat mask. A value that
is not a legal reference resolves to None from parse_reference, which lets a
flag fall back to its next interpretation (a literal password, a bare
certificate path, ...).
"""

from __future__ import annotations

import base64
import binascii
import os
from enum import IntFlag
from pathlib import Path

import structlog

from toolsconf.core.errors import SecretUnresolvedError

logger = structlog.get_logger()


class SecretFormat(IntFlag):
    """Reference schemes a value may use."""

    ENV = 1
    ENV_B64 = 1 << 1
    B64 = 1 << 2
    FILE = 1 << 3

    ALL = ENV | ENV_B64 | B64 | FILE


SCHEMES: dict[str, SecretFormat] = {
    "env": SecretFormat.ENV,
    "env-b64": SecretFormat.ENV_B64,
    "b64": SecretFormat.B64,
    "file": SecretFormat.FILE,
}


def _trim_newline(data: bytes) -> bytes:
    if data.endswith(b"\n"):
        return data[:-1]
    return data


def from_env(name: str) -> bytes:
    """Read an environment variable; unset and empty are both errors."""
    value = os.environ.get(name, "")
    if value == "":
        raise SecretUnresolvedError(
            f"environment variable not found: {name}", {"variable": name}
        )
    return value.encode()


def from_base64(data: str | bytes) -> bytes:
    """
    Decode standard base64, dropping one trailing newline from the result.

    Line breaks in the encoded text are ignored, so the wrapped output of
    base64(1) decodes as is.
    """
    if isinstance(data, str):
        data = data.encode()
    data = data.replace(b"\r", b"").replace(b"\n", b"")
    try:
        decoded = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise SecretUnresolvedError("malformed base64 value") from e
    return _trim_newline(decoded)


def read_file(path: str | Path, trim_newline: bool = True) -> bytes:
    """Read a file relative to the working directory."""
    resolved = Path(path).absolute()
    try:
        data = resolved.read_bytes()
    except OSError as e:
        raise SecretUnresolvedError(
            f"failed to read from file `{resolved}`", {"path": str(resolved)}
        ) from e
    return _trim_newline(data) if trim_newline else data


def read_dir(path: str | Path, trim_newline: bool = True) -> list[bytes]:
    """Read every regular file of a directory, sorted by name."""
    resolved = Path(path).absolute()
    try:
        entries = sorted(p for p in resolved.iterdir() if p.is_file())
    except OSError as e:
        raise SecretUnresolvedError(
            f"failed to read from directory `{resolved}`", {"path": str(resolved)}
        ) from e
    return [read_file(entry, trim_newline) for entry in entries]


def parse_reference(raw: str, formats: SecretFormat = SecretFormat.ALL) -> bytes | None:
    """
    Resolve raw if it is a reference using one of the allowed formats.

    Args:
        raw: Value as typed on the command line or found in the config file
        formats: Schemes the caller accepts for this value

    Returns:
        The referenced bytes, or None when raw is not an allowed reference

    Raises:
        SecretUnresolvedError: raw is an allowed reference that cannot be read
    """
    scheme, sep, payload = raw.partition(":")
    if not sep:
        return None

    selected = SCHEMES.get(scheme)
    if selected is None or not (formats & selected):
        return None

    logger.debug("secret_reference", scheme=scheme)

    if selected is SecretFormat.ENV:
        return from_env(payload)
    if selected is SecretFormat.ENV_B64:
        return from_base64(from_env(payload))
    if selected is SecretFormat.B64:
        return from_base64(payload)
    return read_file(payload)


def resolve_secret(raw: str, formats: SecretFormat = SecretFormat.ALL) -> bytes:
    """Resolve raw as a reference, falling back to the literal value."""
    result = parse_reference(raw, formats)
    if result is None:
        return raw.encode()
    return result


__all__ = [
    "SecretFormat",
    "SCHEMES",
    "from_env",
    "from_base64",
    "read_file",
    "read_dir",
    "parse_reference",
    "resolve_secret",
]
