"""Typed parsing and validation for client config files.

Example ``asc.toml``::

    schema_version = 1

    [client]
    base_url = "https://api.appstoreconnect.apple.com"
    timeout_seconds = 30
    max_pages = 20

Secrets (key and issuer identifiers) stay in the environment; only the key
path and transport knobs may be set here.
"""

from __future__ import annotations

import math
import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .exceptions import ConfigFileNotFoundError, ConfigFileParseError, ConfigFileValidationError

_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class ClientConfigFile:
    """Validated client config values loaded from a TOML file."""

    private_key_path: str | None = None
    base_url: str | None = None
    timeout_seconds: float | None = None
    rate_limit_retries: int | None = None
    retry_after_default_seconds: float | None = None
    max_pages: int | None = None


class _ClientSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    private_key_path: str | None = None
    base_url: str | None = None
    timeout_seconds: float | None = None
    rate_limit_retries: int | None = None
    retry_after_default_seconds: float | None = None
    max_pages: int | None = None

    @field_validator("private_key_path")
    @classmethod
    def _validate_non_empty_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text:
            raise ValueError
        return text

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text.startswith(("https://", "http://")):
            raise ValueError
        return text.rstrip("/")

    @field_validator("timeout_seconds", "retry_after_default_seconds")
    @classmethod
    def _validate_positive_seconds(cls, value: float | None) -> float | None:
        if value is None:
            return None
        if not math.isfinite(value) or value <= 0:
            raise ValueError
        return value

    @field_validator("max_pages")
    @classmethod
    def _validate_positive_int(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 1:
            raise ValueError
        return value

    @field_validator("rate_limit_retries")
    @classmethod
    def _validate_non_negative_int(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 0:
            raise ValueError
        return value


class _ConfigFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    client: _ClientSectionModel

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",)))
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def load_client_config_file(path: Path) -> ClientConfigFile:
    """Load and validate a client TOML config file."""
    if not path.is_file():
        raise ConfigFileNotFoundError(str(path))

    raw_payload = path.read_text(encoding="utf-8")
    try:
        payload: object = tomllib.loads(raw_payload)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileParseError(str(path), str(exc)) from exc

    try:
        model = _ConfigFileModel.model_validate(payload)
    except ValidationError as exc:
        raise ConfigFileValidationError(str(path), _format_validation_error(exc)) from exc

    section = model.client
    return ClientConfigFile(
        private_key_path=section.private_key_path,
        base_url=section.base_url,
        timeout_seconds=section.timeout_seconds,
        rate_limit_retries=section.rate_limit_retries,
        retry_after_default_seconds=section.retry_after_default_seconds,
        max_pages=section.max_pages,
    )
