"""Centralised, injectable configuration for the App Store Connect client."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Self

from dotenv import load_dotenv

from .config_file import ClientConfigFile
from .exceptions import ConfigError, MissingEnvVarError
from .infrastructure.http import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS

DEFAULT_KEY_DIR = "~/.appstoreconnect/private_keys"


class PositiveIntegerEnvVarError(ConfigError, ValueError):
    """Raised when an environment variable must be a positive integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive integer.")


class NonNegativeIntegerEnvVarError(ConfigError, ValueError):
    """Raised when an environment variable must be zero or a positive integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be zero or a positive integer.")


class PositiveNumberEnvVarError(ConfigError, ValueError):
    """Raised when an environment variable must be a positive number."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive number.")


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration for the client.

    Load from environment with `ClientConfig.from_env()` or construct directly for testing.
    """

    # Credentials
    key_id: str = ""
    issuer_id: str = ""
    private_key_path: str = ""

    # Transport
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    rate_limit_retries: int = 3
    retry_after_default_seconds: float = 5.0

    # Pagination
    max_pages: int = 10

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            ClientConfig instance populated from environment.
        """
        load_dotenv(dotenv_path)

        return cls(
            key_id=os.getenv("ASC_KEY_ID", "").strip(),
            issuer_id=os.getenv("ASC_ISSUER_ID", "").strip(),
            private_key_path=os.getenv("ASC_PRIVATE_KEY_PATH", "").strip(),
            base_url=os.getenv("ASC_BASE_URL", "").strip() or DEFAULT_BASE_URL,
            timeout_seconds=_parse_positive_float(
                os.getenv("ASC_TIMEOUT_SECONDS", "30"), env_name="ASC_TIMEOUT_SECONDS"
            ),
            rate_limit_retries=_parse_non_negative_int(
                os.getenv("ASC_RATE_LIMIT_RETRIES", "3"), env_name="ASC_RATE_LIMIT_RETRIES"
            ),
            retry_after_default_seconds=_parse_positive_float(
                os.getenv("ASC_RETRY_AFTER_DEFAULT_SECONDS", "5"),
                env_name="ASC_RETRY_AFTER_DEFAULT_SECONDS",
            ),
            max_pages=_parse_positive_int(
                os.getenv("ASC_MAX_PAGES", "10"), env_name="ASC_MAX_PAGES"
            ),
        )

    def resolved_private_key_path(self) -> Path:
        """Return the key path, defaulting to the conventional AuthKey_<kid>.p8 location."""
        raw = self.private_key_path or f"{DEFAULT_KEY_DIR}/AuthKey_{self.key_id}.p8"
        return Path(raw).expanduser()

    def require_credentials(self) -> tuple[str, str]:
        """Return (key_id, issuer_id), failing fast when either is missing."""
        if not self.key_id:
            raise MissingEnvVarError("ASC_KEY_ID")
        if not self.issuer_id:
            raise MissingEnvVarError("ASC_ISSUER_ID")
        return self.key_id, self.issuer_id

    def with_overrides(
        self,
        *,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        max_pages: int | None = None,
    ) -> Self:
        """Return a new config with specified overrides (for CLI options)."""
        return replace(
            self,
            base_url=self.base_url if base_url is None else base_url.strip(),
            timeout_seconds=self.timeout_seconds if timeout_seconds is None else timeout_seconds,
            max_pages=self.max_pages if max_pages is None else max_pages,
        )

    def with_file_overrides(self, file_config: ClientConfigFile) -> Self:
        """Return a new config with config-file values overriding env/default values."""
        return replace(
            self,
            private_key_path=self.private_key_path
            if file_config.private_key_path is None
            else file_config.private_key_path,
            base_url=self.base_url if file_config.base_url is None else file_config.base_url,
            timeout_seconds=self.timeout_seconds
            if file_config.timeout_seconds is None
            else file_config.timeout_seconds,
            rate_limit_retries=self.rate_limit_retries
            if file_config.rate_limit_retries is None
            else file_config.rate_limit_retries,
            retry_after_default_seconds=self.retry_after_default_seconds
            if file_config.retry_after_default_seconds is None
            else file_config.retry_after_default_seconds,
            max_pages=self.max_pages if file_config.max_pages is None else file_config.max_pages,
        )


def _parse_positive_int(value: str, *, env_name: str) -> int:
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise PositiveIntegerEnvVarError(env_name) from exc
    if parsed < 1:
        raise PositiveIntegerEnvVarError(env_name)
    return parsed


def _parse_non_negative_int(value: str, *, env_name: str) -> int:
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise NonNegativeIntegerEnvVarError(env_name) from exc
    if parsed < 0:
        raise NonNegativeIntegerEnvVarError(env_name)
    return parsed


def _parse_positive_float(value: str, *, env_name: str) -> float:
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise PositiveNumberEnvVarError(env_name) from exc
    if not parsed > 0:
        raise PositiveNumberEnvVarError(env_name)
    return parsed
