"""Typed value objects shared across the client."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

HttpMethod = Literal["GET", "POST", "PATCH", "DELETE"]
QueryItems = tuple[tuple[str, str], ...]


def as_query_items(query: Sequence[tuple[str, str]] | None) -> QueryItems:
    """Freeze caller-supplied query pairs, preserving their order."""
    if not query:
        return ()
    return tuple((str(key), str(value)) for key, value in query)


@dataclass(frozen=True)
class RequestDescriptor:
    """One HTTP call, built by a call-site and consumed once by the executor.

    ``path`` is either an absolute URL (used as-is, e.g. a ``links.next``
    continuation) or a path beginning with ``/`` that is joined to the
    configured base URL together with ``query``.
    """

    method: HttpMethod
    path: str
    query: QueryItems = ()
    body: bytes | None = None

    @classmethod
    def get(cls, path: str, query: Sequence[tuple[str, str]] | None = None) -> RequestDescriptor:
        return cls(method="GET", path=path, query=as_query_items(query))

    @classmethod
    def for_url(cls, url: str) -> RequestDescriptor:
        """Describe a GET against an absolute continuation URL."""
        return cls(method="GET", path=url)
