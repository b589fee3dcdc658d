"""
Typed flag values for the cluster connection flags.

Each value parses its string form the same way whether it comes from the
command line or from the config file.
"""

from __future__ import annotations

from toolsconf.client.config import AuthMode
from toolsconf.client.endpoints import (
    DEFAULT_HOST,
    Endpoint,
    default_endpoint,
    format_endpoints,
    parse_endpoints,
)
from toolsconf.client.tls import (
    DEFAULT_MAX_VERSION,
    DEFAULT_MIN_VERSION,
    TLSProtocol,
    format_tls_protocols,
    parse_tls_protocols,
)
from toolsconf.config.secrets import SecretFormat, parse_reference, read_dir, read_file

PASSWORD_FORMATS = SecretFormat.B64 | SecretFormat.ENV_B64 | SecretFormat.FILE | SecretFormat.ENV
CERT_FORMATS = SecretFormat.B64 | SecretFormat.ENV_B64 | SecretFormat.FILE


class PasswordFlag:
    """
    Password style value (--password, --tls-keyfile-password).

    Accepts env:, env-b64:, b64: and file: references; anything else is the
    password itself.
    """

    def __init__(self, value: bytes = b""):
        self.value = value

    def set(self, value: str) -> None:
        result = parse_reference(value, PASSWORD_FORMATS)
        self.value = value.encode() if result is None else result

    def type_name(self) -> str:
        return "env:<env-var>,env-b64:<env-var>,b64:<b64-pass>,file:<pass-file>,<clear-pass>"

    def __str__(self) -> str:
        return self.value.decode(errors="replace")

    def __bytes__(self) -> bytes:
        return self.value


class CertFlag:
    """Certificate or key given inline (b64:, env-b64:, file:) or as a bare file path."""

    def __init__(self, value: bytes = b""):
        self.value = value

    def set(self, value: str) -> None:
        result = parse_reference(value, CERT_FORMATS)
        if result is None:
            result = read_file(value)
        self.value = result

    def type_name(self) -> str:
        return "env-b64:<cert>,b64:<cert>,<cert-file-name>"

    def __str__(self) -> str:
        return self.value.decode(errors="replace")

    def __bytes__(self) -> bytes:
        return self.value


class CertPathFlag:
    """Directory whose files are all CA certificates."""

    def __init__(self, value: list[bytes] | None = None):
        self.value = list(value or [])

    def set(self, value: str) -> None:
        self.value = read_dir(value)

    def type_name(self) -> str:
        return "<cert-path-name>"

    def __str__(self) -> str:
        if not self.value:
            return ""
        return "[" + ", ".join(v.decode(errors="replace") for v in self.value) + "]"


class AuthModeFlag:
    """Server authentication mode, case insensitive."""

    def __init__(self, value: AuthMode = AuthMode.INTERNAL):
        self.value = value

    def set(self, value: str) -> None:
        try:
            self.value = AuthMode(value.strip().upper())
        except ValueError as e:
            raise ValueError(f"unrecognized auth mode {value!r}") from e

    def type_name(self) -> str:
        return ",".join(mode.value for mode in AuthMode)

    def __str__(self) -> str:
        return self.value.value


class TLSProtocolsFlag:
    """Protocol selection in Apache SSLProtocol syntax, kept as a min/max range."""

    def __init__(
        self,
        min_version: TLSProtocol = DEFAULT_MIN_VERSION,
        max_version: TLSProtocol = DEFAULT_MAX_VERSION,
    ):
        self.min = min_version
        self.max = max_version

    def set(self, value: str) -> None:
        self.min, self.max = parse_tls_protocols(value)

    def type_name(self) -> str:
        return "[[+][-]all] [[+][-]TLSv1] [[+][-]TLSv1.1] [[+][-]TLSv1.2] [[+][-]TLSv1.3]"

    def __str__(self) -> str:
        return format_tls_protocols(self.min, self.max)


class HostTLSPortSliceFlag:
    """
    Seed list in host[:tls-name][:port][,...] notation.

    Starts out holding the default seed; the first set() replaces it and
    later calls append.
    """

    def __init__(self):
        self.use_default = True
        self.seeds: list[Endpoint] = [default_endpoint()]

    def set(self, value: str) -> None:
        parsed = parse_endpoints(value)
        if self.use_default:
            self.use_default = False
            self.seeds = parsed
            return
        self.seeds.extend(parsed)

    def replace(self, values: list[str]) -> None:
        seeds: list[Endpoint] = []
        for value in values:
            seeds.extend(parse_endpoints(value))
        self.use_default = False
        self.seeds = seeds

    def get_slice(self) -> list[str]:
        return [str(seed) for seed in self.seeds]

    def type_name(self) -> str:
        return "host[:tls-name][:port][,...]"

    def __str__(self) -> str:
        if self.use_default:
            return DEFAULT_HOST
        return format_endpoints(self.seeds)


__all__ = [
    "PASSWORD_FORMATS",
    "CERT_FORMATS",
    "PasswordFlag",
    "CertFlag",
    "CertPathFlag",
    "AuthModeFlag",
    "TLSProtocolsFlag",
    "HostTLSPortSliceFlag",
]
