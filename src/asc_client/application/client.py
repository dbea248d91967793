"""High-level App Store Connect client.

Call-sites build a path and query, hand them to this facade and decode the
returned envelope's ``data`` into their own resource shapes.

Usage example:
    client = AppStoreConnectClient(executor)
    app = client.get("/v1/apps/123456789")
    builds = client.get_all_pages("/v1/builds", [("filter[app]", "123456789")])
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence

from ..domain.errors import decode_response, decode_text
from ..envelopes import ListEnvelope, OptionalResourceEnvelope, ResourceEnvelope
from ..protocols import Executor
from ..types import HttpMethod, RequestDescriptor, as_query_items
from .pagination import DEFAULT_MAX_PAGES, collect_all

Query = Sequence[tuple[str, str]] | None


def _encode_body(body: Mapping[str, object]) -> bytes:
    return json.dumps(body).encode("utf-8")


class AppStoreConnectClient:
    """Typed request helpers over a request executor."""

    def __init__(self, executor: Executor, *, max_pages: int = DEFAULT_MAX_PAGES) -> None:
        self.executor = executor
        self.max_pages = max_pages

    def get(self, path: str, query: Query = None) -> ResourceEnvelope:
        return decode_response(ResourceEnvelope, self._send("GET", path, query))

    def get_optional(self, path: str, query: Query = None) -> OptionalResourceEnvelope:
        """GET a single resource that may legitimately be null."""
        return decode_response(OptionalResourceEnvelope, self._send("GET", path, query))

    def get_list(self, path: str, query: Query = None) -> ListEnvelope:
        """GET one page of a list endpoint."""
        return decode_response(ListEnvelope, self._send("GET", path, query))

    def get_all_pages(
        self,
        path: str,
        query: Query = None,
        max_pages: int | None = None,
    ) -> list[object]:
        """GET every page of a list endpoint, up to ``max_pages``."""
        descriptor = RequestDescriptor.get(path, query)
        return collect_all(
            self.executor,
            descriptor,
            max_pages=self.max_pages if max_pages is None else max_pages,
        )

    def post(self, path: str, body: Mapping[str, object]) -> ResourceEnvelope:
        raw = self._send("POST", path, body=_encode_body(body))
        return decode_response(ResourceEnvelope, raw)

    def patch(self, path: str, body: Mapping[str, object]) -> ResourceEnvelope:
        raw = self._send("PATCH", path, body=_encode_body(body))
        return decode_response(ResourceEnvelope, raw)

    def delete(self, path: str) -> None:
        self._send("DELETE", path)

    def delete_with_body(self, path: str, body: Mapping[str, object]) -> None:
        """DELETE with a JSON body (relationship endpoints)."""
        self._send("DELETE", path, body=_encode_body(body))

    def get_raw(self, path: str, query: Query = None) -> str:
        """GET a text response (reports, CSV) as a string."""
        return decode_text(self._send("GET", path, query))

    def _send(
        self,
        method: HttpMethod,
        path: str,
        query: Query = None,
        *,
        body: bytes | None = None,
    ) -> bytes:
        descriptor = RequestDescriptor(
            method=method,
            path=path,
            query=as_query_items(query),
            body=body,
        )
        return self.executor.execute(descriptor)
