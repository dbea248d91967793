"""Custom exceptions for the App Store Connect client.

Every failure the client surfaces is one of these classes. Each carries an
``ErrorKind`` plus the structured detail (status code, server message,
parameter name) callers need to decide between retry and abort.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Closed set of failure categories."""

    INVALID_URL = "invalid_url"
    INVALID_RESPONSE = "invalid_response"
    HTTP_ERROR = "http_error"
    API_ERROR = "api_error"
    RATE_LIMITED = "rate_limited"
    MISSING_PARAMETER = "missing_parameter"
    SIGNING = "signing"
    CONFIG = "config"


class AscClientError(Exception):
    """Base exception for all client errors."""

    kind: ErrorKind


class InvalidURLError(AscClientError):
    """Raised when a request URL cannot be built or parsed."""

    kind = ErrorKind.INVALID_URL

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Invalid URL: {url}")


class InvalidResponseError(AscClientError):
    """Raised on transport failures or undecodable responses."""

    kind = ErrorKind.INVALID_RESPONSE

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid response: {detail}")


class HTTPStatusError(AscClientError):
    """Raised for a non-success status without a structured error body."""

    kind = ErrorKind.HTTP_ERROR

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"HTTP error {status_code}")


class APIError(AscClientError):
    """Raised for a non-success status carrying a JSON:API error body."""

    kind = ErrorKind.API_ERROR

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"ASC API error ({status_code}): {message}")


class RateLimitedError(AscClientError):
    """Raised when 429 responses persist after all backoff attempts."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self) -> None:
        super().__init__("Rate limited by ASC API. Try again later.")


class MissingParameterError(AscClientError):
    """Raised when a required input parameter is absent."""

    kind = ErrorKind.MISSING_PARAMETER

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Missing required parameter: {name}")


class SigningError(AscClientError):
    """Raised when the private key cannot be loaded or a token cannot be signed.

    This is fatal - there is no retry for a malformed key.
    """

    kind = ErrorKind.SIGNING

    @classmethod
    def for_unreadable_key(cls, path: str, reason: str) -> SigningError:
        return cls(f"Could not read private key at {path}: {reason}")

    @classmethod
    def for_invalid_key_format(cls) -> SigningError:
        return cls("Invalid .p8 private key format. Expected PEM-encoded PKCS#8 P-256 key.")


class ConfigError(AscClientError):
    """Base exception for configuration errors."""

    kind = ErrorKind.CONFIG


class MissingEnvVarError(ConfigError):
    """Raised when a required environment variable is missing."""

    def __init__(self, env_name: str) -> None:
        self.env_name = env_name
        super().__init__(f"Missing environment variable: {env_name}. Set it in your .env file.")


class ConfigFileNotFoundError(ConfigError):
    """Raised when an explicitly requested config file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")


class ConfigFileParseError(ConfigError):
    """Raised when a config file is not valid TOML."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} could not be parsed: {detail}")


class ConfigFileValidationError(ConfigError):
    """Raised when a config file fails schema validation."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is invalid: {detail}")
