"""Pytest fixtures for testing.

All tests are network-isolated - socket connections and DNS lookups are blocked by default.
"""

from __future__ import annotations

import socket
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

import asc_client.config as config_module
from asc_client.infrastructure import SigningIdentity
from tests.support.errors import NetworkIsolationError

# =============================================================================
# Network Isolation - Block all socket connections in tests
# =============================================================================


def _blocked_socket_connect(self: socket.socket, *args: object, **kwargs: object) -> None:
    raise NetworkIsolationError(str(args))


def _blocked_getaddrinfo(host: object, port: object, *args: object, **kwargs: object) -> list[object]:
    raise NetworkIsolationError(f"{host}:{port}")


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch: pytest.MonkeyPatch) -> None:
    """Block all network access in tests.

    Tests that need HTTP should use a MagicMock session or FakeExecutor.
    """
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)
    monkeypatch.setattr(socket, "getaddrinfo", _blocked_getaddrinfo)


_ASC_ENV_VARS = (
    "ASC_KEY_ID",
    "ASC_ISSUER_ID",
    "ASC_PRIVATE_KEY_PATH",
    "ASC_BASE_URL",
    "ASC_TIMEOUT_SECONDS",
    "ASC_RATE_LIMIT_RETRIES",
    "ASC_RETRY_AFTER_DEFAULT_SECONDS",
    "ASC_MAX_PAGES",
)


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Clear client env vars and stop .env discovery."""
    for name in _ASC_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    def no_dotenv(dotenv_path: str | None = None) -> bool:
        _ = dotenv_path
        return False

    monkeypatch.setattr(config_module, "load_dotenv", no_dotenv)
    return monkeypatch


# =============================================================================
# Signing keys
# =============================================================================


@pytest.fixture(scope="session")
def private_key() -> ec.EllipticCurvePrivateKey:
    """A throwaway P-256 key shared by the test session."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def private_key_pem(private_key: ec.EllipticCurvePrivateKey) -> bytes:
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture
def key_file(tmp_path: Path, private_key_pem: bytes) -> Path:
    """Write the test key as an App Store Connect style .p8 file."""
    path = tmp_path / "AuthKey_TESTKEY123.p8"
    path.write_bytes(private_key_pem)
    return path


@pytest.fixture
def signing_identity(private_key: ec.EllipticCurvePrivateKey) -> SigningIdentity:
    return SigningIdentity(
        key_id="TESTKEY123",
        issuer_id="69a6de70-0000-47e3-e053-5b8c7c11a4d1",
        private_key=private_key,
    )
