"""Authenticated request execution against the App Store Connect API.

Usage example:
    import requests

    from asc_client.infrastructure.http import RequestExecutor
    from asc_client.infrastructure.resilience import RetryPolicy
    from asc_client.infrastructure.tokens import TokenIssuer
    from asc_client.types import RequestDescriptor

    executor = RequestExecutor(
        session=requests.Session(),
        tokens=TokenIssuer(identity),
        retry_policy=RetryPolicy(),
    )
    body = executor.execute(RequestDescriptor.get("/v1/apps", [("limit", "200")]))
"""

from __future__ import annotations

import time
from typing_extensions import override
from urllib.parse import quote, urlencode, urlsplit

import requests

from ..domain.errors import classify_response, classify_transport_error
from ..exceptions import InvalidURLError
from ..observability import get_logger
from ..protocols import Executor, RetryPolicy, TokenProvider
from ..types import QueryItems, RequestDescriptor
from .resilience import RetryPolicy as RetryPolicyImpl
from .tokens import SigningIdentity, TokenIssuer

logger = get_logger("asc_client.infrastructure.http")

DEFAULT_BASE_URL = "https://api.appstoreconnect.apple.com"
DEFAULT_TIMEOUT_SECONDS = 30.0

_ALLOWED_SCHEMES = ("http", "https")
# Characters left unescaped in relative paths (RFC 3986 pchar plus "/").
_PATH_SAFE = "/:@!$&'()*+,;=-._~%"


def build_url(base_url: str, path: str, query: QueryItems = ()) -> str:
    """Resolve a descriptor path against the base URL.

    Absolute URLs (pagination ``next`` links) are used as-is; relative paths
    must start with ``/``. Query pairs are appended in order.

    Raises:
        InvalidURLError: If the URL is malformed.
    """
    if not path or any(ch.isspace() for ch in path):
        raise InvalidURLError(path)

    parts = urlsplit(path)
    if parts.scheme:
        if parts.scheme not in _ALLOWED_SCHEMES or not parts.netloc:
            raise InvalidURLError(path)
        url = path
    else:
        if not path.startswith("/") or path.startswith("//"):
            raise InvalidURLError(path)
        url = base_url.rstrip("/") + quote(path, safe=_PATH_SAFE)

    if query:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}{urlencode(query)}"
    return url


def build_asc_executor(
    *,
    identity: SigningIdentity,
    base_url: str = DEFAULT_BASE_URL,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    max_rate_limit_retries: int = 3,
    default_retry_after_seconds: float = 5.0,
) -> RequestExecutor:
    session = requests.Session()
    tokens = TokenIssuer(identity)
    retry_policy = RetryPolicyImpl(
        max_rate_limit_retries=max_rate_limit_retries,
        default_retry_after_seconds=default_retry_after_seconds,
    )
    return RequestExecutor(
        session=session,
        tokens=tokens,
        base_url=base_url,
        retry_policy=retry_policy,
        timeout_seconds=timeout_seconds,
    )


class RequestExecutor(Executor):
    """Executes one logical call with bearer auth and a bounded retry policy.

    Provides typed error handling:
    - 2xx returns the raw body (204 returns b"")
    - 401 on the first attempt invalidates the token and retries once
    - 429 waits for Retry-After and retries up to the policy limit
    - Everything else is classified and raised on first occurrence
    - Transport failures (bad URL, timeout, connection) are never retried
    """

    def __init__(
        self,
        *,
        session: requests.Session,
        tokens: TokenProvider,
        base_url: str = DEFAULT_BASE_URL,
        retry_policy: RetryPolicy | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.session = session
        self.tokens = tokens
        self.base_url = base_url
        self.retry_policy = retry_policy or RetryPolicyImpl()
        self.timeout_seconds = timeout_seconds

    @override
    def execute(self, descriptor: RequestDescriptor, attempt: int = 0) -> bytes:
        """Perform the call and return the raw response body.

        Raises:
            InvalidURLError: If the URL cannot be built or is rejected by the transport
            InvalidResponseError: On timeout or connection failure
            RateLimitedError: If 429 persists after all retries
            APIError: For failures with a JSON:API error body
            HTTPStatusError: For other failures
            SigningError: If a token cannot be issued
        """
        url = build_url(self.base_url, descriptor.path, descriptor.query)
        method = descriptor.method

        while True:
            token = self.tokens.get_token()
            headers = {
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            }

            try:
                r = self.session.request(
                    method,
                    url,
                    headers=headers,
                    data=descriptor.body,
                    timeout=self.timeout_seconds,
                )
            except requests.RequestException as exc:
                error = classify_transport_error(exc, url)
                logger.error("%s %s failed before a response: %s", method, url, error)
                raise error from exc

            status = r.status_code
            if status == 204:
                return b""
            if 200 <= status <= 299:
                return r.content

            if status == 401 and self.retry_policy.should_retry_auth(attempt):
                logger.warning("%s %s returned 401; refreshing token and retrying", method, url)
                self.tokens.invalidate_token()
                attempt += 1
                continue

            if status == 429 and self.retry_policy.should_retry_rate_limit(attempt):
                delay = self.retry_policy.rate_limit_delay(r.headers)
                logger.warning(
                    "%s %s rate limited (attempt %d); retrying in %.1fs",
                    method,
                    url,
                    attempt + 1,
                    delay,
                )
                time.sleep(delay)
                attempt += 1
                continue

            error = classify_response(status, r.content)
            logger.warning("%s %s failed: %s", method, url, error)
            raise error
