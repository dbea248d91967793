"""Concrete infrastructure implementations and shared helpers."""

from .http import DEFAULT_BASE_URL, RequestExecutor, build_asc_executor, build_url
from .resilience import RetryPolicy, parse_retry_after
from .tokens import (
    CachedToken,
    SigningIdentity,
    TokenIssuer,
    load_private_key,
    load_signing_identity,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "CachedToken",
    "RequestExecutor",
    "RetryPolicy",
    "SigningIdentity",
    "TokenIssuer",
    "build_asc_executor",
    "build_url",
    "load_private_key",
    "load_signing_identity",
    "parse_retry_after",
]
