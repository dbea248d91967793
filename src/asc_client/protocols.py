"""Protocol definitions for dependency injection.

These protocols define the abstract interfaces that client components depend on,
enabling isolated unit testing with fake implementations.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from .types import RequestDescriptor


@runtime_checkable
class TokenProvider(Protocol):
    """Source of bearer tokens for outbound requests."""

    def get_token(self) -> str:
        """Return a currently valid bearer token.

        Raises:
            SigningError: If the token cannot be signed.
        """
        ...

    def invalidate_token(self) -> None:
        """Discard the cached token so the next request mints a fresh one."""
        ...

    def expires_at(self) -> float | None:
        """Return the epoch expiry of the cached token, or None when nothing is cached."""
        ...


@runtime_checkable
class Executor(Protocol):
    """Executes one logical authenticated HTTP call."""

    def execute(self, descriptor: RequestDescriptor, attempt: int = 0) -> bytes:
        """Perform the call and return the raw response body.

        Raises:
            AscClientError: Classified failure for the call.
        """
        ...


@runtime_checkable
class RetryPolicy(Protocol):
    """Retry rules for authentication and rate-limit responses."""

    max_auth_retries: int
    max_rate_limit_retries: int

    def should_retry_auth(self, attempt: int) -> bool:
        """Return True when a 401 at this attempt should be retried."""
        ...

    def should_retry_rate_limit(self, attempt: int) -> bool:
        """Return True when a 429 at this attempt should be retried."""
        ...

    def rate_limit_delay(self, headers: Mapping[str, str] | None) -> float:
        """Return seconds to wait before retrying a 429."""
        ...
