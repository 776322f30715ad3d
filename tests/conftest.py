"""
Global test configuration.
"""

import datetime
import os

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID
import pytest

from envcast.settings import reset_settings


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_envcast_env(request, monkeypatch):
    """Ensure a clean ENVCAST_* environment and fresh settings for each test.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the current env.
    """
    if not request.node.get_closest_marker("allow_env_pollution"):
        for key in list(os.environ.keys()):
            if key.startswith("ENVCAST_"):
                monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def environ():
    """A plain dict standing in for os.environ."""
    return {}


# --- PEM Fixtures ---


@pytest.fixture(scope="session")
def private_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def certificate(private_key):
    """A self-signed certificate for the session key."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "envcast.test")])
    now = datetime.datetime.now(datetime.UTC)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(private_key, hashes.SHA256())
    )


@pytest.fixture(scope="session")
def key_pem(private_key):
    return private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def other_key_pem():
    """An unrelated unencrypted key."""
    return (
        ec.generate_private_key(ec.SECP256R1())
        .private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
        .decode("ascii")
    )


@pytest.fixture(scope="session")
def encrypted_key_pem(private_key):
    return private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.BestAvailableEncryption(b"secret"),
    ).decode("ascii")


@pytest.fixture(scope="session")
def cert_pem(certificate):
    return certificate.public_bytes(serialization.Encoding.PEM).decode("ascii")


def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "contract: Behavioral contracts of the public conversion API",
        "allow_env_pollution: Keep ENVCAST_* variables from the real environment",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)
