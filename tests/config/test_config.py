"""Tests for ClientConfig behaviour."""

from pathlib import Path

import pytest

from asc_client.config import (
    ClientConfig,
    NonNegativeIntegerEnvVarError,
    PositiveIntegerEnvVarError,
    PositiveNumberEnvVarError,
)
from asc_client.config_file import ClientConfigFile
from asc_client.exceptions import ConfigError, MissingEnvVarError


def test_from_env_defaults(isolated_env: pytest.MonkeyPatch) -> None:
    config = ClientConfig.from_env()

    assert config.key_id == ""
    assert config.issuer_id == ""
    assert config.base_url == "https://api.appstoreconnect.apple.com"
    assert config.timeout_seconds == 30.0
    assert config.rate_limit_retries == 3
    assert config.retry_after_default_seconds == 5.0
    assert config.max_pages == 10


def test_from_env_reads_all_values(isolated_env: pytest.MonkeyPatch) -> None:
    isolated_env.setenv("ASC_KEY_ID", " KEY123 ")
    isolated_env.setenv("ASC_ISSUER_ID", "issuer-uuid")
    isolated_env.setenv("ASC_PRIVATE_KEY_PATH", "/keys/AuthKey_KEY123.p8")
    isolated_env.setenv("ASC_BASE_URL", "https://api.example.test")
    isolated_env.setenv("ASC_TIMEOUT_SECONDS", "12.5")
    isolated_env.setenv("ASC_RATE_LIMIT_RETRIES", "0")
    isolated_env.setenv("ASC_RETRY_AFTER_DEFAULT_SECONDS", "2")
    isolated_env.setenv("ASC_MAX_PAGES", "25")

    config = ClientConfig.from_env()

    assert config.key_id == "KEY123"
    assert config.issuer_id == "issuer-uuid"
    assert config.private_key_path == "/keys/AuthKey_KEY123.p8"
    assert config.base_url == "https://api.example.test"
    assert config.timeout_seconds == 12.5
    assert config.rate_limit_retries == 0
    assert config.retry_after_default_seconds == 2.0
    assert config.max_pages == 25


@pytest.mark.parametrize(
    ("env_name", "value", "error"),
    [
        ("ASC_MAX_PAGES", "0", PositiveIntegerEnvVarError),
        ("ASC_MAX_PAGES", "many", PositiveIntegerEnvVarError),
        ("ASC_RATE_LIMIT_RETRIES", "-1", NonNegativeIntegerEnvVarError),
        ("ASC_TIMEOUT_SECONDS", "0", PositiveNumberEnvVarError),
        ("ASC_RETRY_AFTER_DEFAULT_SECONDS", "nan", PositiveNumberEnvVarError),
    ],
)
def test_from_env_rejects_invalid_numbers(
    isolated_env: pytest.MonkeyPatch,
    env_name: str,
    value: str,
    error: type[Exception],
) -> None:
    isolated_env.setenv(env_name, value)

    with pytest.raises(error, match=env_name) as exc_info:
        ClientConfig.from_env()
    assert isinstance(exc_info.value, ConfigError)


def test_resolved_private_key_path_defaults_to_key_directory(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    path = ClientConfig(key_id="KEY123").resolved_private_key_path()

    assert path == tmp_path / ".appstoreconnect" / "private_keys" / "AuthKey_KEY123.p8"


def test_resolved_private_key_path_prefers_explicit_path() -> None:
    config = ClientConfig(key_id="KEY123", private_key_path="/keys/other.p8")

    assert config.resolved_private_key_path() == Path("/keys/other.p8")


@pytest.mark.parametrize(
    ("config", "missing"),
    [
        (ClientConfig(issuer_id="issuer"), "ASC_KEY_ID"),
        (ClientConfig(key_id="KEY123"), "ASC_ISSUER_ID"),
    ],
)
def test_require_credentials_fails_fast(config: ClientConfig, missing: str) -> None:
    with pytest.raises(MissingEnvVarError) as exc_info:
        config.require_credentials()

    assert exc_info.value.env_name == missing


def test_require_credentials_returns_pair() -> None:
    assert ClientConfig(key_id="K", issuer_id="I").require_credentials() == ("K", "I")


def test_with_overrides_preserves_fields() -> None:
    base = ClientConfig(
        key_id="K",
        issuer_id="I",
        private_key_path="/keys/k.p8",
        rate_limit_retries=1,
        retry_after_default_seconds=9.0,
    )

    updated = base.with_overrides(base_url=" https://api.example.test ", max_pages=3)

    assert updated.base_url == "https://api.example.test"
    assert updated.max_pages == 3
    assert updated.timeout_seconds == base.timeout_seconds
    assert updated.key_id == "K"
    assert updated.issuer_id == "I"
    assert updated.private_key_path == "/keys/k.p8"
    assert updated.rate_limit_retries == 1
    assert updated.retry_after_default_seconds == 9.0


def test_with_overrides_none_keeps_values() -> None:
    base = ClientConfig(max_pages=7)

    assert base.with_overrides() == base


def test_with_file_overrides_only_replaces_set_values() -> None:
    base = ClientConfig(key_id="K", issuer_id="I", max_pages=7, timeout_seconds=20.0)

    updated = base.with_file_overrides(
        ClientConfigFile(base_url="https://api.example.test", rate_limit_retries=0)
    )

    assert updated.base_url == "https://api.example.test"
    assert updated.rate_limit_retries == 0
    assert updated.max_pages == 7
    assert updated.timeout_seconds == 20.0
    assert updated.key_id == "K"
