"""Exports for test fakes."""

from .clock import FakeClock
from .executor import FakeExecutor, json_body, list_page
from .tokens import FakeTokenProvider

__all__ = [
    "FakeClock",
    "FakeExecutor",
    "FakeTokenProvider",
    "json_body",
    "list_page",
]
