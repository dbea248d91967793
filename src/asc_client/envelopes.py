"""JSON:API response envelopes.

The client only interprets the envelope: ``data`` stays opaque (one resource
object or an ordered list of them), ``included`` is kept as raw mappings and
``links``/``meta`` expose the pagination fields. Call-sites decode resource
attributes themselves.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

ResourceObject = dict[str, object]


class _Envelope(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class PageLinks(_Envelope):
    self_link: str | None = Field(default=None, alias="self")
    next: str | None = None
    first: str | None = None


class Paging(_Envelope):
    total: int | None = None
    limit: int | None = None


class Meta(_Envelope):
    paging: Paging | None = None


class ResourceEnvelope(_Envelope):
    """Single-resource response; ``data`` must be present and non-null."""

    data: ResourceObject | list[object]
    links: PageLinks | None = None
    included: list[ResourceObject] | None = None


class OptionalResourceEnvelope(_Envelope):
    """Single-resource response whose ``data`` may be null (e.g. an unlinked build)."""

    data: ResourceObject | None = None
    links: PageLinks | None = None
    included: list[ResourceObject] | None = None


class ListEnvelope(_Envelope):
    """Resource-list response, one page of a paginated collection."""

    data: list[object]
    links: PageLinks | None = None
    included: list[ResourceObject] | None = None
    meta: Meta | None = None

    @property
    def next_url(self) -> str | None:
        if self.links is None:
            return None
        return self.links.next or None

    @property
    def total(self) -> int | None:
        if self.meta is None or self.meta.paging is None:
            return None
        return self.meta.paging.total
