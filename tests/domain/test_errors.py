"""Tests for response and transport error classification."""

from __future__ import annotations

import json

import pytest
import requests

from asc_client.domain import (
    classify_response,
    classify_transport_error,
    decode_response,
    decode_text,
    describe_error_entry,
)
from asc_client.envelopes import ListEnvelope
from asc_client.exceptions import (
    APIError,
    ErrorKind,
    HTTPStatusError,
    InvalidResponseError,
    InvalidURLError,
    RateLimitedError,
)
from asc_client.io_contracts import ErrorEntryIO


def _errors(*entries: dict[str, object]) -> bytes:
    return json.dumps({"errors": list(entries)}).encode("utf-8")


def _entry(title: str | None = None, detail: str | None = None) -> ErrorEntryIO:
    return {"id": None, "status": None, "code": None, "title": title, "detail": detail}


class TestDescribeErrorEntry:
    """Tests for rendering a single error entry."""

    def test_title_and_detail(self) -> None:
        assert describe_error_entry(_entry("Not found", "No app 1")) == "Not found: No app 1"

    def test_only_one_part(self) -> None:
        assert describe_error_entry(_entry(title="Conflict")) == "Conflict"
        assert describe_error_entry(_entry(detail="Missing field")) == "Missing field"

    def test_no_parts(self) -> None:
        assert describe_error_entry(_entry()) == "Unknown error"


class TestClassifyResponse:
    """Tests for mapping terminal responses to errors."""

    def test_429_is_rate_limited_even_with_body(self) -> None:
        error = classify_response(429, _errors({"title": "Slow down"}))

        assert isinstance(error, RateLimitedError)
        assert error.kind is ErrorKind.RATE_LIMITED
        assert str(error) == "Rate limited by ASC API. Try again later."

    def test_error_entries_are_joined_in_order(self) -> None:
        error = classify_response(
            409,
            _errors(
                {"status": "409", "title": "First", "detail": "a"},
                {"status": "409", "title": "Second"},
            ),
        )

        assert isinstance(error, APIError)
        assert error.status_code == 409
        assert error.message == "First: a; Second"
        assert error.kind is ErrorKind.API_ERROR

    def test_error_entries_ignore_unknown_fields(self) -> None:
        error = classify_response(
            422,
            _errors({"title": "Invalid", "detail": "x", "source": {"pointer": "/data"}}),
        )

        assert isinstance(error, APIError)
        assert error.message == "Invalid: x"

    @pytest.mark.parametrize(
        "body",
        [None, b"", b"not json", b'{"errors": []}', b'{"data": {}}'],
    )
    def test_without_error_entries_is_http_error(self, body: bytes | None) -> None:
        error = classify_response(404, body)

        assert isinstance(error, HTTPStatusError)
        assert error.status_code == 404
        assert str(error) == "HTTP error 404"
        assert error.kind is ErrorKind.HTTP_ERROR


class TestClassifyTransportError:
    """Tests for requests that never produced a response."""

    def test_url_errors(self) -> None:
        error = classify_transport_error(requests.exceptions.MissingSchema("no"), "bad")

        assert isinstance(error, InvalidURLError)
        assert str(error) == "Invalid URL: bad"

    def test_timeout(self) -> None:
        error = classify_transport_error(requests.Timeout("slow"), "https://x.test/v1")

        assert isinstance(error, InvalidResponseError)
        assert error.detail == "Request timed out: https://x.test/v1"

    def test_other_transport_error_keeps_cause_name(self) -> None:
        error = classify_transport_error(requests.ConnectionError("refused"), "https://x.test")

        assert isinstance(error, InvalidResponseError)
        assert error.detail == "ConnectionError: refused"


class TestDecoding:
    """Tests for body decoding helpers."""

    def test_decode_text(self) -> None:
        assert decode_text("name,count\nÅpp,1\n".encode()) == "name,count\nÅpp,1\n"

    def test_decode_text_rejects_invalid_utf8(self) -> None:
        with pytest.raises(InvalidResponseError, match="Could not decode response as UTF-8 string"):
            decode_text(b"\xff\xfe\xfa")

    def test_decode_response_wraps_validation_failure(self) -> None:
        with pytest.raises(InvalidResponseError, match="ListEnvelope"):
            decode_response(ListEnvelope, b'{"links": {}}')

    def test_decode_response_reads_envelope(self) -> None:
        envelope = decode_response(
            ListEnvelope,
            b'{"data": [{"id": "1"}], "links": {"self": "s", "next": "n"}, "meta": {"paging": {"total": 9}}}',
        )

        assert envelope.data == [{"id": "1"}]
        assert envelope.next_url == "n"
        assert envelope.total == 9


def test_minimal_error_body_at_403() -> None:
    error = classify_response(403, b'{"errors":[{"title":"Bad","detail":"oops"}]}')

    assert isinstance(error, APIError)
    assert (error.status_code, error.message) == (403, "Bad: oops")
