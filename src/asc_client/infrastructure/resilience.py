"""Retry rules for authentication and rate-limit responses.

Usage example:
    from asc_client.infrastructure.resilience import RetryPolicy

    policy = RetryPolicy(max_rate_limit_retries=3, default_retry_after_seconds=5.0)
    if policy.should_retry_rate_limit(attempt):
        time.sleep(policy.rate_limit_delay(response.headers))
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing_extensions import override

from ..protocols import RetryPolicy as RetryPolicyProtocol


def parse_retry_after(headers: Mapping[str, str] | None) -> float | None:
    """Parse Retry-After header into seconds, if available."""
    if not headers:
        return None
    value = headers.get("Retry-After")
    if not value:
        return None
    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        seconds = None
    if seconds is not None:
        if not math.isfinite(seconds) or seconds < 0:
            return None
        return seconds
    try:
        dt = parsedate_to_datetime(value)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        delta = (dt - datetime.now(UTC)).total_seconds()
        return max(0.0, delta)
    except (AttributeError, OverflowError, TypeError, ValueError):
        return None


@dataclass
class RetryPolicy(RetryPolicyProtocol):
    """Retry policy for the request executor.

    A 401 is retried once with a fresh token, on the assumption that the token
    went stale; a second 401 means the credentials are bad. A 429 is retried
    up to ``max_rate_limit_retries`` times, waiting for the server-provided
    Retry-After. Both paths share one attempt counter. Nothing else is retried.
    """

    max_auth_retries: int = 1
    max_rate_limit_retries: int = 3
    default_retry_after_seconds: float = 5.0

    @override
    def should_retry_auth(self, attempt: int) -> bool:
        return attempt < self.max_auth_retries

    @override
    def should_retry_rate_limit(self, attempt: int) -> bool:
        return attempt < self.max_rate_limit_retries

    @override
    def rate_limit_delay(self, headers: Mapping[str, str] | None) -> float:
        retry_after = parse_retry_after(headers)
        if retry_after is None:
            return self.default_retry_after_seconds
        return retry_after
