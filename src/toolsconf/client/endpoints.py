"""
Cluster endpoint notation.

Seeds are written as comma separated host[:tls-name][:port] tokens where the
host is an IPv4 address, a hostname, or a bracketed IPv6 address:

    10.0.0.1:3000,10.0.0.2:tls1:3001,[::1]:tls2:3002
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from toolsconf.core.errors import EndpointSyntaxError

DEFAULT_PORT = 3000
DEFAULT_HOST = "127.0.0.1"
MAX_PORT = 65535

_IPV6_HOST = r"\[(?P<host>.*)\]"
_HOST = r"(?P<host>[^:]*)"
_TLS_NAME = r"(?P<tls_name>.*)"
_PORT = r"(?P<port>[0-9]+)"

# Bracketed IPv6 forms come first since the plain host patterns are prefixes
# of them.
ENDPOINT_PATTERNS = [
    re.compile(rf"{_IPV6_HOST}:{_TLS_NAME}:{_PORT}"),
    re.compile(rf"{_IPV6_HOST}:{_PORT}"),
    re.compile(_IPV6_HOST),
    re.compile(rf"{_HOST}:{_TLS_NAME}:{_PORT}"),
    re.compile(rf"{_HOST}:{_PORT}"),
    re.compile(_HOST),
]


@dataclass
class Endpoint:
    """A single seed node; tls_name and port are unset when empty/zero."""

    host: str
    tls_name: str = ""
    port: int = 0

    def __str__(self) -> str:
        return format_endpoint(self)


def default_endpoint() -> Endpoint:
    return Endpoint(host=DEFAULT_HOST, port=DEFAULT_PORT)


def format_endpoint(endpoint: Endpoint) -> str:
    """Render an endpoint back to host[:tls-name][:port]."""
    text = endpoint.host
    if ":" in text:
        text = f"[{text}]"
    if endpoint.tls_name:
        text = f"{text}:{endpoint.tls_name}"
    if endpoint.port:
        text = f"{text}:{endpoint.port}"
    return text


def format_endpoints(endpoints: list[Endpoint]) -> str:
    """Render a seed list; a single seed renders bare."""
    rendered = [format_endpoint(e) for e in endpoints]
    if len(rendered) == 1:
        return rendered[0]
    return "[" + ", ".join(rendered) + "]"


def _parse_port(text: str) -> int:
    port = int(text, 10)
    if port > MAX_PORT:
        raise ValueError(f"value out of range: {text}")
    return port


def parse_endpoint(token: str) -> Endpoint:
    """
    Parse one host[:tls-name][:port] token.

    Raises:
        EndpointSyntaxError: token matches no supported format, the port is
            out of range, or the host is empty
    """
    for pattern in ENDPOINT_PATTERNS:
        match = pattern.fullmatch(token)
        if match is None:
            continue

        groups = match.groupdict()
        host = groups["host"]
        if not host:
            raise EndpointSyntaxError(
                f"failed to parse host : empty host in {token!r}", {"token": token}
            )

        port = 0
        if groups.get("port") is not None:
            try:
                port = _parse_port(groups["port"])
            except ValueError as e:
                raise EndpointSyntaxError(
                    f"failed to parse port : {e}", {"token": token, "field": "port"}
                ) from e

        return Endpoint(host=host, tls_name=groups.get("tls_name") or "", port=port)

    raise EndpointSyntaxError(
        f"{token!r} does not match any expected formats", {"token": token}
    )


def parse_endpoints(text: str) -> list[Endpoint]:
    """Parse a comma separated list of endpoints; any bad token fails the whole list."""
    return [parse_endpoint(token) for token in text.split(",")]


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "Endpoint",
    "default_endpoint",
    "format_endpoint",
    "format_endpoints",
    "parse_endpoint",
    "parse_endpoints",
]
