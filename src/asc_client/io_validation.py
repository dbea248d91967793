"""Pydantic-based validation helpers for inbound API payloads."""

from __future__ import annotations

from typing import TypeVar

from typing_extensions import TypedDict

from pydantic import BaseModel, TypeAdapter, ValidationError

from .io_contracts import ErrorEntryIO


SchemaT = TypeVar("SchemaT")
ModelT = TypeVar("ModelT", bound=BaseModel)


class IncomingDataError(ValueError):
    """Raised when inbound data fails validation."""


class ErrorEntryInput(TypedDict, total=False):
    id: str | None
    status: str | None
    code: str | None
    title: str | None
    detail: str | None


class ErrorResponseInput(TypedDict):
    errors: list[ErrorEntryInput]


def validate_json_as(schema: type[SchemaT], payload: str | bytes | bytearray) -> SchemaT:
    try:
        return TypeAdapter(schema).validate_json(payload)
    except ValidationError as exc:
        message = f"Invalid JSON payload for {schema}."
        raise IncomingDataError(message) from exc


def decode_envelope(model: type[ModelT], payload: bytes) -> ModelT:
    """Decode raw response bytes into a JSON:API envelope model."""
    try:
        return model.model_validate_json(payload)
    except ValidationError as exc:
        message = f"Response is not a valid {model.__name__}."
        raise IncomingDataError(message) from exc


def parse_error_response(payload: bytes | None) -> list[ErrorEntryIO] | None:
    """Decode a JSON:API error body.

    Returns None when the body is empty or not an error envelope, so the
    caller can fall back to a bare status error.
    """
    if not payload:
        return None
    try:
        response = validate_json_as(ErrorResponseInput, payload)
    except IncomingDataError:
        return None
    return [
        {
            "id": entry.get("id"),
            "status": entry.get("status"),
            "code": entry.get("code"),
            "title": entry.get("title"),
            "detail": entry.get("detail"),
        }
        for entry in response["errors"]
    ]
