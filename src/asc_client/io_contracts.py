"""Boundary-neutral IO contracts for infrastructure validation.

Usage example:
    from asc_client.io_contracts import ErrorEntryIO

    entry: ErrorEntryIO = {
        "id": None,
        "status": "403",
        "code": "FORBIDDEN_ERROR",
        "title": "Bad",
        "detail": "oops",
    }
"""

from __future__ import annotations

from typing import TypedDict


class ErrorEntryIO(TypedDict):
    """One entry of a JSON:API ``errors`` array; absent fields are ``None``."""

    id: str | None
    status: str | None
    code: str | None
    title: str | None
    detail: str | None
