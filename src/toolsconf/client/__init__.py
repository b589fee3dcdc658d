"""
Cluster connection building blocks: endpoints, TLS material and the
connection configuration assembled from them.
"""

from toolsconf.client.config import AuthMode, ClientPolicy, ClusterConfig
from toolsconf.client.endpoints import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    Endpoint,
    format_endpoint,
    parse_endpoint,
    parse_endpoints,
)
from toolsconf.client.tls import (
    Identity,
    TLSMaterial,
    TLSProtocol,
    TrustPool,
    build_identity,
    build_tls_material,
    build_trust_pool,
    parse_tls_protocols,
)

__all__ = [
    # Config
    "AuthMode",
    "ClientPolicy",
    "ClusterConfig",
    # Endpoints
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "Endpoint",
    "format_endpoint",
    "parse_endpoint",
    "parse_endpoints",
    # TLS
    "Identity",
    "TLSMaterial",
    "TLSProtocol",
    "TrustPool",
    "build_identity",
    "build_tls_material",
    "build_trust_pool",
    "parse_tls_protocols",
]
