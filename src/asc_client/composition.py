"""Composition root for wiring the client and CLI dependencies."""

from __future__ import annotations

from .application.client import AppStoreConnectClient
from .cli import CliDependencies, create_app
from .config import ClientConfig
from .infrastructure import build_asc_executor, load_signing_identity
from .protocols import TokenProvider


def build_client(config: ClientConfig) -> tuple[AppStoreConnectClient, TokenProvider]:
    """Build a ready-to-use client and the token provider behind it.

    Args:
        config: Client configuration (credentials, transport and pagination knobs).

    Raises:
        MissingEnvVarError: If the key or issuer identifier is not configured.
        SigningError: If the private key cannot be read or parsed.
    """
    key_id, issuer_id = config.require_credentials()
    identity = load_signing_identity(
        key_id=key_id,
        issuer_id=issuer_id,
        private_key_path=config.resolved_private_key_path(),
    )
    executor = build_asc_executor(
        identity=identity,
        base_url=config.base_url,
        timeout_seconds=config.timeout_seconds,
        max_rate_limit_retries=config.rate_limit_retries,
        default_retry_after_seconds=config.retry_after_default_seconds,
    )
    return AppStoreConnectClient(executor, max_pages=config.max_pages), executor.tokens


def build_cli_dependencies(*, config: ClientConfig) -> CliDependencies:
    """Build concrete dependencies for CLI commands."""
    client, tokens = build_client(config)
    return CliDependencies(client=client, tokens=tokens)


app = create_app(build_cli_dependencies)
