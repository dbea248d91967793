"""Error classification for App Store Connect responses.

Pure mapping from a status code and optional response body to one of the
client's exception types. The executor handles success statuses, the 401
retry and the 429 backoff itself and only consults this module once a
response is terminal.
"""

from __future__ import annotations

from typing import TypeVar

import requests
from pydantic import BaseModel

from ..exceptions import (
    APIError,
    AscClientError,
    HTTPStatusError,
    InvalidResponseError,
    InvalidURLError,
    RateLimitedError,
)
from ..io_contracts import ErrorEntryIO
from ..io_validation import IncomingDataError, decode_envelope, parse_error_response

RATE_LIMIT_STATUS = 429

_URL_ERRORS: tuple[type[requests.RequestException], ...] = (
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.URLRequired,
)


def describe_error_entry(entry: ErrorEntryIO) -> str:
    """Render one error entry as ``title: detail`` using whichever parts exist."""
    parts = [part for part in (entry["title"], entry["detail"]) if part is not None]
    if not parts:
        return "Unknown error"
    return ": ".join(parts)


def classify_response(status_code: int, body: bytes | None = None) -> AscClientError:
    """Map a terminal non-success response to its error.

    Args:
        status_code: HTTP status of the final attempt.
        body: Raw response body, if any.

    Returns:
        RateLimitedError for 429, APIError when the body holds at least one
        JSON:API error entry, otherwise HTTPStatusError.
    """
    if status_code == RATE_LIMIT_STATUS:
        return RateLimitedError()
    entries = parse_error_response(body)
    if entries:
        message = "; ".join(describe_error_entry(entry) for entry in entries)
        return APIError(status_code, message)
    return HTTPStatusError(status_code)


def classify_transport_error(error: requests.RequestException, url: str) -> AscClientError:
    """Map a request that never produced a response."""
    if isinstance(error, _URL_ERRORS):
        return InvalidURLError(url)
    if isinstance(error, requests.Timeout):
        return InvalidResponseError(f"Request timed out: {url}")
    return InvalidResponseError(f"{type(error).__name__}: {error}")


def decode_text(body: bytes) -> str:
    """Decode a raw text response (reports, CSV) as UTF-8."""
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidResponseError("Could not decode response as UTF-8 string") from exc


ModelT = TypeVar("ModelT", bound=BaseModel)


def decode_response(model: type[ModelT], body: bytes) -> ModelT:
    """Decode a JSON:API envelope, classifying failures as invalid responses."""
    try:
        return decode_envelope(model, body)
    except IncomingDataError as exc:
        raise InvalidResponseError(f"Could not decode {model.__name__}: {exc}") from exc
