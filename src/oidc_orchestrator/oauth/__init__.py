from functools import lru_cache

from oidc_orchestrator.oauth.errors import (
    ConfigurationError,
    OAuthClientError,
    ProviderError,
    RequestPathAuthenticationError,
    TransportError,
)
from oidc_orchestrator.oauth.events import AuthorizationEvent, AuthorizationHook
from oidc_orchestrator.oauth.provider import GenericProvider, GenericProviderFactory
from oidc_orchestrator.oauth.service import OAuthService
from oidc_orchestrator.oauth.tokens import AccessToken, Grant
from oidc_orchestrator.oauth.types import ProviderBinding, ProviderFactory, ResourceOwner
from oidc_orchestrator.settings import get_settings


@lru_cache()
def get_oauth_service() -> OAuthService:
    return OAuthService(get_settings().oidc)


__all__ = [
    "AccessToken",
    "AuthorizationEvent",
    "AuthorizationHook",
    "ConfigurationError",
    "GenericProvider",
    "GenericProviderFactory",
    "Grant",
    "OAuthClientError",
    "OAuthService",
    "ProviderBinding",
    "ProviderError",
    "ProviderFactory",
    "RequestPathAuthenticationError",
    "ResourceOwner",
    "TransportError",
    "get_oauth_service",
]
