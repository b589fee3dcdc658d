"""
Connection configuration assembled from resolved flags.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import StrEnum

from toolsconf.client.endpoints import Endpoint, default_endpoint
from toolsconf.client.tls import (
    DEFAULT_MAX_VERSION,
    DEFAULT_MIN_VERSION,
    TLSMaterial,
    TLSProtocol,
    build_tls_material,
)


class AuthMode(StrEnum):
    """How the server authenticates the user."""

    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"
    PKI = "PKI"


@dataclass
class ClientPolicy:
    """Settings a database client needs to open its connections."""

    user: str = ""
    password: str = ""
    auth_mode: AuthMode = AuthMode.INTERNAL
    tls: TLSMaterial | None = None


@dataclass
class ClusterConfig:
    """Resolved cluster connection settings."""

    seeds: list[Endpoint] = field(default_factory=lambda: [default_endpoint()])
    user: str = ""
    password: str = ""
    auth_mode: AuthMode = AuthMode.INTERNAL
    root_ca: list[bytes] = field(default_factory=list)
    cert: bytes = b""
    key: bytes = b""
    key_pass: bytes = b""
    tls_min_version: TLSProtocol = DEFAULT_MIN_VERSION
    tls_max_version: TLSProtocol = DEFAULT_MAX_VERSION

    def new_tls_material(self) -> TLSMaterial | None:
        return build_tls_material(
            self.root_ca,
            cert=self.cert,
            key=self.key,
            key_pass=self.key_pass,
            min_version=self.tls_min_version,
            max_version=self.tls_max_version,
        )

    def new_client_policy(self) -> ClientPolicy:
        """
        Build the client policy, including TLS material when any is configured.

        Raises:
            TLSMaterialError: certificate or key cannot be used
        """
        return ClientPolicy(
            user=self.user,
            password=self.password,
            auth_mode=self.auth_mode,
            tls=self.new_tls_material(),
        )

    def new_hosts(self) -> list[Endpoint]:
        return [copy.copy(seed) for seed in self.seeds]


__all__ = [
    "AuthMode",
    "ClientPolicy",
    "ClusterConfig",
]
