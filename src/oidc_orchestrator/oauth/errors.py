from __future__ import annotations

from typing import Any, Mapping


INVALID_PROVIDER_FACTORY = 1652689564769
REQUEST_PATH_AUTHENTICATION_FAILED = 1510049345


class OAuthClientError(Exception):
    def __init__(
        self,
        message: str,
        *,
        error: str | None = None,
        description: str | None = None,
        status_code: int | None = None,
        details: Mapping[str, Any] | None = None,
        code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error = error
        self.description = description
        self.status_code = status_code
        self.details = dict(details or {})
        self.code = code


class ConfigurationError(OAuthClientError):
    """Raised when the orchestrator is misconfigured. Not recoverable."""


class ProviderError(OAuthClientError):
    """Raised when the remote provider rejects a protocol step."""


class TransportError(ProviderError):
    """Raised when the provider could not be reached."""


class RequestPathAuthenticationError(OAuthClientError, RuntimeError):
    """Raised when the authorize endpoint did not answer with a redirect."""
