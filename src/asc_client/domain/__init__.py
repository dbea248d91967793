"""Domain modules for the client."""

from .errors import (
    classify_response,
    classify_transport_error,
    decode_response,
    decode_text,
    describe_error_entry,
)

__all__ = [
    "classify_response",
    "classify_transport_error",
    "decode_response",
    "decode_text",
    "describe_error_entry",
]
