from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping, Optional
from urllib.parse import parse_qs, urlencode, urlparse

import httpx

from oidc_orchestrator.oauth.errors import (
    INVALID_PROVIDER_FACTORY,
    REQUEST_PATH_AUTHENTICATION_FAILED,
    ConfigurationError,
    ProviderError,
    RequestPathAuthenticationError,
    TransportError,
)
from oidc_orchestrator.oauth.events import AuthorizationEvent, AuthorizationHook
from oidc_orchestrator.oauth.loader import import_object
from oidc_orchestrator.oauth.tokens import AccessToken, Grant
from oidc_orchestrator.oauth.types import ProviderBinding, ProviderFactory, ResourceOwner
from oidc_orchestrator.settings import OidcSettings


logger = logging.getLogger(__name__)


class OAuthService:
    """Token lifecycle against a single identity provider.

    Builds authorization URLs, exchanges codes or credentials for tokens,
    refreshes expired tokens, resolves the resource owner and revokes tokens.
    The provider binding is created on first use and kept for the lifetime of
    the instance. Tokens are never stored here; callers own persistence.
    """

    def __init__(
        self,
        settings: OidcSettings,
        *,
        hook: AuthorizationHook | None = None,
        provider_factory: ProviderFactory | None = None,
    ) -> None:
        if provider_factory is not None:
            _check_factory(provider_factory, type(provider_factory).__name__)
        self._settings = settings
        self._hook = hook if hook is not None else AuthorizationHook.from_settings(settings)
        self._provider_factory = provider_factory
        self._provider: ProviderBinding | None = None
        self._provider_lock = asyncio.Lock()

    @property
    def settings(self) -> OidcSettings:
        return self._settings

    # Authorization request

    async def get_authorization_url(
        self,
        request: Optional[Any] = None,
        options: Optional[Mapping[str, str]] = None,
    ) -> str:
        event = self._hook.dispatch(AuthorizationEvent(request, self._settings, dict(options or {})))
        provider = await self._get_provider()
        return provider.get_authorization_url(event.options)

    def get_state(self) -> str | None:
        """State generated by the last :meth:`get_authorization_url` call."""
        if self._provider is None:
            return None
        return self._provider.get_state()

    # Token exchange

    async def get_access_token(
        self,
        code_or_username: str,
        password: str | None = None,
        code_verifier: str | None = None,
    ) -> AccessToken:
        """Authorization code grant, or password grant when ``password`` is given.

        Raises:
            ProviderError: the provider rejected the grant or was unreachable.
        """
        if password is None:
            options = {"code": code_or_username}
            if code_verifier is not None:
                options["code_verifier"] = code_verifier
            grant = Grant.AUTHORIZATION_CODE
        else:
            options = {"username": code_or_username, "password": password}
            grant = Grant.PASSWORD
        provider = await self._get_provider()
        return await provider.get_access_token(grant, options)

    async def get_access_token_for_client(self) -> AccessToken:
        provider = await self._get_provider()
        return await provider.get_access_token(Grant.CLIENT_CREDENTIALS)

    async def get_access_token_with_request_path_authentication(
        self, username: str, password: str
    ) -> AccessToken | None:
        """Obtain a code with HTTP Basic auth on the authorize endpoint, then exchange it.

        Non-standard, supported by WSO2 Identity Server among others. Returns
        None when the provider redirected without issuing a code.

        Raises:
            RequestPathAuthenticationError: the response was not a redirect.
        """
        if not self._settings.endpoint_authorize:
            raise ConfigurationError("No authorize endpoint configured", error="configuration_error")
        url = f"{self._settings.endpoint_authorize}?" + urlencode(
            {
                "response_type": "code",
                "client_id": self._settings.client_id,
                "scope": self._settings.scopes,
                "redirect_uri": self._redirect_uri(),
            }
        )
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, follow_redirects=False) as client:
                resp = await client.get(url, auth=(username, password))
        except httpx.HTTPError as exc:
            raise TransportError(
                "Network error during request path authentication",
                error="network_error",
                description=str(exc),
            ) from exc

        if resp.status_code < 300 or resp.status_code >= 400:
            raise RequestPathAuthenticationError(
                "Request failed",
                status_code=resp.status_code,
                code=REQUEST_PATH_AUTHENTICATION_FAILED,
            )

        location = resp.headers.get("Location")
        if location:
            codes = parse_qs(urlparse(location).query).get("code")
            if codes:
                return await self.get_access_token(codes[0])
        logger.info("request path authentication redirected without a code", extra={"status_code": resp.status_code})
        return None

    # Refresh

    async def get_fresh_access_token(self, serialized_token: str) -> AccessToken | None:
        """Deserialize a token and renew it through the refresh grant if it expired.

        Returns None for an empty or unreadable token, and when the refresh is
        rejected. A token that has not expired is returned as is.
        """
        if not serialized_token:
            return None
        try:
            data = json.loads(serialized_token)
        except ValueError:
            logger.warning("discarding unreadable serialized token")
            return None
        if not isinstance(data, dict) or not data:
            return None
        try:
            token = AccessToken.from_dict(data)
        except (TypeError, ValueError) as exc:
            logger.warning("discarding invalid serialized token: %s", exc)
            return None

        if not token.has_expired():
            return token
        if not token.refresh_token:
            logger.warning("access token expired and carries no refresh token")
            return None

        provider = await self._get_provider()
        try:
            fresh = await provider.get_access_token(Grant.REFRESH_TOKEN, {"refresh_token": token.refresh_token})
        except ProviderError as exc:
            logger.warning(
                "token refresh failed: %s",
                exc.description or exc,
                extra={"grant_type": Grant.REFRESH_TOKEN.value, "status_code": exc.status_code},
            )
            return None

        if not fresh.refresh_token:
            # provider did not rotate the refresh token; keep the one we have
            fresh = fresh.with_refresh_token(token.refresh_token)
        return fresh

    # Resource owner and revocation

    async def get_resource_owner(self, token: AccessToken) -> ResourceOwner:
        provider = await self._get_provider()
        return await provider.get_resource_owner(token)

    async def revoke_token(self, token: AccessToken) -> bool:
        """POST the token to the revocation endpoint.

        Returns False when no revocation endpoint is configured. Any response
        from the endpoint counts as success; its status is not inspected.
        """
        endpoint = self._settings.endpoint_revoke
        if not endpoint:
            return False

        provider = await self._get_provider()
        resp = await provider.send(
            "POST",
            endpoint,
            auth=(self._settings.client_id, self._settings.client_secret or ""),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            content=urlencode({"token": token.access_token}),
        )
        logger.info("token revocation answered", extra={"status_code": resp.status_code})
        return True

    # Provider binding

    async def _get_provider(self) -> ProviderBinding:
        if self._provider is not None:
            return self._provider
        async with self._provider_lock:
            if self._provider is None:
                self._provider = self._create_provider()
        return self._provider

    def _create_provider(self) -> ProviderBinding:
        factory = self._provider_factory
        if factory is None:
            candidate = import_object(self._settings.provider_factory)
            _check_factory(candidate, self._settings.provider_factory)
            if isinstance(candidate, type):
                candidate = candidate()
            _check_factory(candidate, self._settings.provider_factory)
            factory = candidate

        effective = self._settings.model_copy(update={"redirect_uri": self._redirect_uri()})
        provider = factory.create(effective)
        logger.debug("provider binding created", extra={"provider": type(provider).__name__})
        return provider

    def _redirect_uri(self) -> str:
        return self._settings.redirect_uri or self._settings.site_redirect_uri()


def _check_factory(factory: Any, name: str) -> None:
    if not isinstance(factory, ProviderFactory) or not callable(getattr(factory, "create", None)):
        raise ConfigurationError(
            f"OAuth provider factory {name} must implement ProviderFactory",
            error="configuration_error",
            code=INVALID_PROVIDER_FACTORY,
        )
