"""Root test configuration."""

import datetime
import logging
from dataclasses import dataclass

import pytest
import structlog
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from toolsconf.config import resolver as resolver_module
from toolsconf.config.settings import get_settings


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def reset_toolsconf_state():
    """Drop cached settings and the process wide resolver around every test."""
    get_settings.cache_clear()
    resolver_module._default_resolver = None
    yield
    get_settings.cache_clear()
    resolver_module._default_resolver = None


@dataclass
class CertPair:
    cert: x509.Certificate
    key: ec.EllipticCurvePrivateKey
    cert_pem: bytes
    key_pem: bytes


def make_cert_pair(common_name: str) -> CertPair:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    return CertPair(
        cert=cert,
        key=key,
        cert_pem=cert.public_bytes(serialization.Encoding.PEM),
        key_pem=key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.TraditionalOpenSSL,
            serialization.NoEncryption(),
        ),
    )


@pytest.fixture(scope="session")
def root_ca():
    """Self-signed CA certificate."""
    return make_cert_pair("toolsconf-root-ca")


@pytest.fixture(scope="session")
def second_root_ca():
    return make_cert_pair("toolsconf-root-ca-2")


@pytest.fixture(scope="session")
def client_pair():
    """Client certificate with its unencrypted private key."""
    return make_cert_pair("toolsconf-client")


@pytest.fixture(scope="session")
def legacy_encrypted_key_pem(client_pair):
    """client_pair's key as a Proc-Type: 4,ENCRYPTED PEM block, passphrase 'key-pass'."""
    return client_pair.key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.BestAvailableEncryption(b"key-pass"),
    )


@pytest.fixture(scope="session")
def pkcs8_encrypted_key_pem(client_pair):
    return client_pair.key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.BestAvailableEncryption(b"key-pass"),
    )
