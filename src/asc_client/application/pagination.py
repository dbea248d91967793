"""Next-link pagination over JSON:API list endpoints.

Usage example:
    from asc_client.application.pagination import collect_all
    from asc_client.types import RequestDescriptor

    builds = collect_all(executor, RequestDescriptor.get("/v1/builds"), max_pages=5)

Each page's URL comes from the previous page's ``links.next``, so pages are
fetched strictly in sequence. The walk stops at the first page without a
next link or after ``max_pages`` pages, whichever comes first. Reaching the
cap is not an error: the result is partial and callers that need the true
size should read ``meta.paging.total`` from the pages yielded by
``walk_pages``.
"""

from __future__ import annotations

from collections.abc import Iterator

from ..domain.errors import decode_response
from ..envelopes import ListEnvelope
from ..observability import get_logger
from ..protocols import Executor
from ..types import RequestDescriptor

logger = get_logger("asc_client.application.pagination")

DEFAULT_MAX_PAGES = 10


class MaxPagesError(ValueError):
    """Raised when a page ceiling below one is requested."""

    def __init__(self, max_pages: int) -> None:
        super().__init__(f"max_pages must be at least 1 (got {max_pages}).")


def walk_pages(
    executor: Executor,
    descriptor: RequestDescriptor,
    *,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> Iterator[ListEnvelope]:
    """Yield decoded list pages in order, following ``links.next``.

    Raises:
        MaxPagesError: Immediately, if ``max_pages`` < 1.
        AscClientError: From any page fetch or decode, during iteration.
    """
    if max_pages < 1:
        raise MaxPagesError(max_pages)
    return _iter_pages(executor, descriptor, max_pages)


def _iter_pages(
    executor: Executor,
    descriptor: RequestDescriptor,
    max_pages: int,
) -> Iterator[ListEnvelope]:
    page = 0
    next_url: str | None = None
    last: ListEnvelope | None = None

    while page < max_pages:
        request = RequestDescriptor.for_url(next_url) if next_url else descriptor
        last = decode_response(ListEnvelope, executor.execute(request))
        yield last
        next_url = last.next_url
        page += 1
        if next_url is None:
            return

    logger.info(
        "Stopped %s after %d pages with more available (total=%s)",
        descriptor.path,
        page,
        last.total if last is not None else None,
    )


def collect_all(
    executor: Executor,
    descriptor: RequestDescriptor,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> list[object]:
    """Return every item across pages, in the order the server returned them.

    Any page failure propagates and no partial result is returned.
    """
    items: list[object] = []
    for envelope in walk_pages(executor, descriptor, max_pages=max_pages):
        items.extend(envelope.data)
    return items
