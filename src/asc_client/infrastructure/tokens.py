"""ES256 bearer-token issuance for App Store Connect.

Usage example:
    from pathlib import Path

    from asc_client.infrastructure.tokens import TokenIssuer, load_signing_identity

    identity = load_signing_identity(
        key_id="ABC123DEFG",
        issuer_id="69a6de70-0000-47e3-e053-5b8c7c11a4d1",
        private_key_path=Path("~/.appstoreconnect/private_keys/AuthKey_ABC123DEFG.p8"),
    )
    issuer = TokenIssuer(identity)
    token = issuer.get_token()

Tokens are compact JWTs: base64url(header).base64url(payload).base64url(r||s).
The issuer caches one token at a time and refreshes it shortly before it
expires. Concurrent callers that find the cache empty or stale share a single
signing operation.
"""

from __future__ import annotations

import base64
import json
import threading
import time
from collections.abc import Callable, Mapping
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import Path
from typing_extensions import override

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from ..exceptions import SigningError
from ..observability import get_logger
from ..protocols import TokenProvider

logger = get_logger("asc_client.infrastructure.tokens")

TOKEN_LIFETIME_SECONDS = 20 * 60
REFRESH_BUFFER_SECONDS = 2 * 60
AUDIENCE = "appstoreconnect-v1"
ALGORITHM = "ES256"

_P256_COORDINATE_BYTES = 32


def base64url_encode(data: bytes) -> str:
    """Base64url-encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _encode_segment(claims: Mapping[str, object]) -> str:
    serialised = json.dumps(claims, sort_keys=True, separators=(",", ":"))
    return base64url_encode(serialised.encode("utf-8"))


def build_header(key_id: str) -> str:
    return _encode_segment({"alg": ALGORITHM, "kid": key_id, "typ": "JWT"})


def build_payload(
    issuer_id: str,
    *,
    issued_at: int,
    lifetime_seconds: int = TOKEN_LIFETIME_SECONDS,
    audience: str = AUDIENCE,
) -> str:
    return _encode_segment(
        {
            "iss": issuer_id,
            "iat": issued_at,
            "exp": issued_at + lifetime_seconds,
            "aud": audience,
        }
    )


def load_private_key(pem: bytes) -> ec.EllipticCurvePrivateKey:
    """Parse a PEM-encoded PKCS#8 P-256 private key.

    Raises:
        SigningError: If the data is not a P-256 EC private key.
    """
    try:
        key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningError.for_invalid_key_format() from exc
    if not isinstance(key, ec.EllipticCurvePrivateKey) or not isinstance(key.curve, ec.SECP256R1):
        raise SigningError.for_invalid_key_format()
    return key


@dataclass(frozen=True)
class SigningIdentity:
    """Key identifier, issuer identifier and the private key that signs for them."""

    key_id: str
    issuer_id: str
    private_key: ec.EllipticCurvePrivateKey = field(repr=False, compare=False)

    def sign(self, signing_input: bytes) -> bytes:
        """Sign with ECDSA P-256/SHA-256 and return the raw r||s signature."""
        try:
            der_signature = self.private_key.sign(signing_input, ec.ECDSA(hashes.SHA256()))
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise SigningError(f"Could not sign token for key {self.key_id}: {exc}") from exc
        r, s = decode_dss_signature(der_signature)
        return r.to_bytes(_P256_COORDINATE_BYTES, "big") + s.to_bytes(_P256_COORDINATE_BYTES, "big")


def load_signing_identity(*, key_id: str, issuer_id: str, private_key_path: Path) -> SigningIdentity:
    """Read the private key from disk and build the identity.

    Raises:
        SigningError: If the key file cannot be read or parsed.
    """
    path = private_key_path.expanduser()
    try:
        pem = path.read_bytes()
    except OSError as exc:
        raise SigningError.for_unreadable_key(str(path), exc.strerror or str(exc)) from exc
    return SigningIdentity(key_id=key_id, issuer_id=issuer_id, private_key=load_private_key(pem))


@dataclass(frozen=True)
class CachedToken:
    """A signed token and the epoch time at which it expires."""

    value: str = field(repr=False)
    expires_at: float

    def is_fresh(self, now: float, refresh_buffer_seconds: float) -> bool:
        return now < self.expires_at - refresh_buffer_seconds


class TokenIssuer(TokenProvider):
    """Thread-safe, single-flight cache of one signed bearer token.

    The lock only guards the refresh decision and the store. Signing happens
    outside it: the first caller to find the cache stale becomes the leader and
    mints, while later callers wait on the leader's future.
    """

    def __init__(
        self,
        identity: SigningIdentity,
        *,
        lifetime_seconds: int = TOKEN_LIFETIME_SECONDS,
        refresh_buffer_seconds: int = REFRESH_BUFFER_SECONDS,
        audience: str = AUDIENCE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if lifetime_seconds <= 0:
            raise ValueError("lifetime_seconds must be positive.")
        if not 0 <= refresh_buffer_seconds < lifetime_seconds:
            raise ValueError("refresh_buffer_seconds must be smaller than lifetime_seconds.")
        self._identity = identity
        self._lifetime_seconds = lifetime_seconds
        self._refresh_buffer_seconds = refresh_buffer_seconds
        self._audience = audience
        self._clock = clock
        self._lock = threading.Lock()
        self._cached: CachedToken | None = None
        self._in_flight: Future[CachedToken] | None = None
        # Bumped by invalidate_token so a mint started earlier is not stored.
        self._generation = 0

    @property
    def key_id(self) -> str:
        return self._identity.key_id

    @property
    def cached_token(self) -> CachedToken | None:
        with self._lock:
            return self._cached

    @override
    def expires_at(self) -> float | None:
        cached = self.cached_token
        return None if cached is None else cached.expires_at

    @override
    def get_token(self) -> str:
        with self._lock:
            cached = self._cached
            if cached is not None and cached.is_fresh(self._clock(), self._refresh_buffer_seconds):
                return cached.value
            in_flight = self._in_flight
            if in_flight is None:
                future: Future[CachedToken] = Future()
                self._in_flight = future
                generation = self._generation

        if in_flight is not None:
            return in_flight.result().value
        return self._lead_refresh(future, generation).value

    @override
    def invalidate_token(self) -> None:
        with self._lock:
            self._cached = None
            self._in_flight = None
            self._generation += 1
        logger.info("Token invalidated for key %s", self._identity.key_id)

    def _lead_refresh(self, future: Future[CachedToken], generation: int) -> CachedToken:
        try:
            token = self._mint()
        except BaseException as exc:
            with self._lock:
                if self._in_flight is future:
                    self._in_flight = None
            future.set_exception(exc)
            raise

        with self._lock:
            if self._generation == generation:
                self._cached = token
            if self._in_flight is future:
                self._in_flight = None
        future.set_result(token)
        return token

    def _mint(self) -> CachedToken:
        now = self._clock()
        header = build_header(self._identity.key_id)
        payload = build_payload(
            self._identity.issuer_id,
            issued_at=int(now),
            lifetime_seconds=self._lifetime_seconds,
            audience=self._audience,
        )
        signing_input = f"{header}.{payload}"
        signature = self._identity.sign(signing_input.encode("ascii"))
        token = CachedToken(
            value=f"{signing_input}.{base64url_encode(signature)}",
            expires_at=now + self._lifetime_seconds,
        )
        logger.debug("Minted token for key %s expiring at %.0f", self._identity.key_id, token.expires_at)
        return token
