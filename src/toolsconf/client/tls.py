"""
TLS material for cluster connections.

Builds the trust pool (platform roots plus caller supplied CAs), the client
identity (certificate plus, possibly legacy-encrypted, private key) and the
negotiable protocol range, and turns them into an ssl.SSLContext.
"""

from __future__ import annotations

import os
import re
import ssl
import tempfile
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path

import structlog
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from toolsconf.core.errors import TLSMaterialError

logger = structlog.get_logger()


class TLSProtocol(IntEnum):
    """Negotiable protocol versions, oldest first."""

    TLSV1 = int(ssl.TLSVersion.TLSv1)
    TLSV1_1 = int(ssl.TLSVersion.TLSv1_1)
    TLSV1_2 = int(ssl.TLSVersion.TLSv1_2)
    TLSV1_3 = int(ssl.TLSVersion.TLSv1_3)

    @property
    def label(self) -> str:
        return _LABELS[self]

    def to_ssl(self) -> ssl.TLSVersion:
        return ssl.TLSVersion(self.value)

    def __str__(self) -> str:
        return self.label


_LABELS = {
    TLSProtocol.TLSV1: "TLSv1",
    TLSProtocol.TLSV1_1: "TLSv1.1",
    TLSProtocol.TLSV1_2: "TLSv1.2",
    TLSProtocol.TLSV1_3: "TLSv1.3",
}
PROTOCOL_TOKENS = {label: protocol for protocol, label in _LABELS.items()}

DEFAULT_MIN_VERSION = TLSProtocol.TLSV1_2
DEFAULT_MAX_VERSION = TLSProtocol.TLSV1_2


def parse_tls_protocols(text: str) -> tuple[TLSProtocol, TLSProtocol]:
    """
    Parse an Apache SSLProtocol style selection into a (min, max) range.

    Examples:
        ""                  -> (TLSv1.2, TLSv1.2)
        "all -TLSv1"        -> (TLSv1.1, TLSv1.3)
        "+TLSv1.2 +TLSv1.3" -> (TLSv1.2, TLSv1.3)

    Raises:
        ValueError: unknown or unsupported token, a missing +/- prefix, or a
            selection that is empty or not contiguous
    """
    tokens = text.split()
    if not tokens:
        return DEFAULT_MIN_VERSION, DEFAULT_MAX_VERSION

    selected: set[TLSProtocol] = set()

    for token in tokens:
        sign = ""
        if token[0] in "+-":
            sign, token = token[0], token[1:]

        if token == "SSLv2":
            raise ValueError("SSLv2 not supported (RFC 6176)")
        if token == "SSLv3":
            raise ValueError("SSLv3 not supported")

        if token == "all":
            current = set(TLSProtocol)
        elif token in PROTOCOL_TOKENS:
            current = {PROTOCOL_TOKENS[token]}
        else:
            raise ValueError(f"unknown protocol version {token}")

        if sign == "+":
            selected |= current
        elif sign == "-":
            selected -= current
        else:
            if selected:
                raise ValueError(
                    f"TLS protocol {token} overrides already set parameters. "
                    "Check if a +/- prefix is missing"
                )
            selected = current

    ordered = list(TLSProtocol)
    indexes = [i for i, protocol in enumerate(ordered) if protocol in selected]
    if not indexes:
        raise ValueError("no TLS protocol selected")

    # Only a min/max range can be negotiated.
    if indexes[-1] - indexes[0] + 1 != len(indexes):
        raise ValueError("you may only specify a range of protocols")

    return ordered[indexes[0]], ordered[indexes[-1]]


def format_tls_protocols(min_version: TLSProtocol, max_version: TLSProtocol) -> str:
    if min_version == max_version:
        return max_version.label
    if min_version == min(TLSProtocol) and max_version == max(TLSProtocol):
        return "all"
    return f"{min_version.label},{max_version.label}"


def _platform_roots_available() -> bool:
    paths = ssl.get_default_verify_paths()
    for location in (paths.cafile, paths.capath):
        if location and os.path.exists(location):
            return True
    return False


@dataclass
class TrustPool:
    """CA certificates trusted when verifying the server."""

    system_defaults: bool = False
    certificates: list[x509.Certificate] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.certificates)

    def pem_bundle(self) -> str:
        return "".join(
            cert.public_bytes(serialization.Encoding.PEM).decode() for cert in self.certificates
        )


def build_trust_pool(ca_blobs: list[bytes]) -> TrustPool:
    """
    Start from the platform roots and append every parseable CA PEM blob.

    Blobs that do not parse are skipped.
    """
    pool = TrustPool(system_defaults=_platform_roots_available())

    for index, blob in enumerate(ca_blobs):
        if not blob:
            continue
        try:
            pool.certificates.extend(x509.load_pem_x509_certificates(blob))
        except ValueError as e:
            logger.debug("ca_blob_skipped", index=index, error=str(e))

    return pool


_PEM_BLOCK = re.compile(
    rb"-----BEGIN (?P<label>[^-\r\n]+)-----\r?\n(?P<body>.*?)-----END (?P=label)-----",
    re.DOTALL,
)


@dataclass(frozen=True)
class Identity:
    """
    Client certificate paired with its private key.

    chain holds the leaf followed by any intermediates from the certificate
    file; cert_pem carries all of them.
    """

    certificate: x509.Certificate
    private_key: PrivateKeyTypes
    cert_pem: bytes
    key_pem: bytes
    chain: tuple[x509.Certificate, ...] = ()


def _is_legacy_encrypted(body: bytes) -> bool:
    header, _, _ = body.partition(b"\n\n")
    return b"Proc-Type: 4,ENCRYPTED" in header.replace(b"\r", b"")


def _load_private_key(key_bytes: bytes, passphrase: bytes | None) -> PrivateKeyTypes:
    block = _PEM_BLOCK.search(key_bytes)
    if block is None:
        raise TLSMaterialError("failed to decode PEM data for key or certificate")

    pem = block.group(0)
    encrypted = _is_legacy_encrypted(block.group("body")) or (
        block.group("label") == b"ENCRYPTED PRIVATE KEY"
    )

    if encrypted:
        try:
            return serialization.load_pem_private_key(pem, password=passphrase or b"")
        except (ValueError, TypeError) as e:
            raise TLSMaterialError("failed to decrypt PEM block") from e

    try:
        return serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError) as e:
        raise TLSMaterialError("failed to parse private key") from e


def _public_key_der(key) -> bytes:
    return key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def build_identity(cert_bytes: bytes, key_bytes: bytes, passphrase: bytes | None = None) -> Identity:
    """
    Decode (and decrypt if needed) the key and pair it with the certificate.

    Raises:
        TLSMaterialError: no PEM block, decryption failure, unparseable
            certificate, or a certificate/key mismatch
    """
    private_key = _load_private_key(key_bytes, passphrase)
    key_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )

    try:
        chain = x509.load_pem_x509_certificates(cert_bytes)
    except ValueError as e:
        raise TLSMaterialError("failed to add certificate and key to the pool") from e

    certificate = chain[0]
    if _public_key_der(certificate.public_key()) != _public_key_der(private_key.public_key()):
        raise TLSMaterialError(
            "failed to add certificate and key to the pool: private key does not match "
            "certificate public key"
        )

    return Identity(
        certificate=certificate,
        private_key=private_key,
        cert_pem=b"".join(cert.public_bytes(serialization.Encoding.PEM) for cert in chain),
        key_pem=key_pem,
        chain=tuple(chain),
    )


@dataclass
class TLSMaterial:
    """Everything needed to open a TLS connection to the cluster."""

    trust_pool: TrustPool
    identity: Identity | None = None
    min_version: TLSProtocol = DEFAULT_MIN_VERSION
    max_version: TLSProtocol = DEFAULT_MAX_VERSION

    def to_ssl_context(self) -> ssl.SSLContext:
        """Build a verifying client context from this material."""
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        if self.trust_pool.system_defaults:
            context.load_default_certs(ssl.Purpose.SERVER_AUTH)
        if self.trust_pool.certificates:
            context.load_verify_locations(cadata=self.trust_pool.pem_bundle())

        context.minimum_version = self.min_version.to_ssl()
        context.maximum_version = self.max_version.to_ssl()

        if self.identity is not None:
            # load_cert_chain only accepts file paths.
            with tempfile.TemporaryDirectory() as tmp:
                cert_file = Path(tmp) / "cert.pem"
                key_file = Path(tmp) / "key.pem"
                cert_file.write_bytes(self.identity.cert_pem)
                key_file.write_bytes(self.identity.key_pem)
                key_file.chmod(0o600)
                context.load_cert_chain(certfile=cert_file, keyfile=key_file)

        return context


def build_tls_material(
    root_ca: list[bytes],
    cert: bytes = b"",
    key: bytes = b"",
    key_pass: bytes = b"",
    min_version: TLSProtocol = DEFAULT_MIN_VERSION,
    max_version: TLSProtocol = DEFAULT_MAX_VERSION,
) -> TLSMaterial | None:
    """Assemble TLS material; None when there are no CAs, certificate or key."""
    if not root_ca and not cert and not key:
        return None

    if min_version > max_version:
        raise TLSMaterialError(
            f"minimum TLS version {min_version} is above maximum {max_version}"
        )

    trust_pool = build_trust_pool(root_ca)

    identity = None
    if cert or key:
        identity = build_identity(cert, key, key_pass or None)

    logger.debug(
        "tls_material_built",
        appended_cas=len(trust_pool),
        system_defaults=trust_pool.system_defaults,
        identity=identity is not None,
        min_version=min_version.label,
        max_version=max_version.label,
    )

    return TLSMaterial(
        trust_pool=trust_pool,
        identity=identity,
        min_version=min_version,
        max_version=max_version,
    )


__all__ = [
    "TLSProtocol",
    "DEFAULT_MIN_VERSION",
    "DEFAULT_MAX_VERSION",
    "parse_tls_protocols",
    "format_tls_protocols",
    "TrustPool",
    "build_trust_pool",
    "Identity",
    "build_identity",
    "TLSMaterial",
    "build_tls_material",
]
