from __future__ import annotations

import logging
from typing import Any, Dict, Mapping
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import httpx

from oidc_orchestrator.oauth.errors import ConfigurationError, ProviderError, TransportError
from oidc_orchestrator.oauth.tokens import AccessToken, Grant
from oidc_orchestrator.oauth.types import ResourceOwner
from oidc_orchestrator.security import generate_state
from oidc_orchestrator.settings import OidcSettings


logger = logging.getLogger(__name__)


class GenericProvider:
    """Provider binding for any standards-compliant OAuth 2.0 / OIDC server.

    Endpoints and credentials come from :class:`OidcSettings`; all HTTP goes
    through httpx.
    """

    def __init__(self, settings: OidcSettings, *, timeout: float | None = None) -> None:
        if not settings.endpoint_authorize or not settings.endpoint_token:
            raise ConfigurationError(
                "Provider configuration requires endpoint_authorize and endpoint_token",
                error="configuration_error",
            )
        self._settings = settings
        self._timeout = timeout if timeout is not None else settings.http_timeout
        self._state: str | None = None

    @property
    def settings(self) -> OidcSettings:
        return self._settings

    def get_authorization_url(self, options: Mapping[str, Any]) -> str:
        params: Dict[str, Any] = {
            "response_type": "code",
            "client_id": self._settings.client_id,
            "redirect_uri": self._settings.redirect_uri,
            "scope": self._settings.scopes,
        }
        params.update(options)
        if not params.get("state"):
            params["state"] = generate_state()
        self._state = str(params["state"])
        return _append_query(str(self._settings.endpoint_authorize), params)

    def get_state(self) -> str | None:
        return self._state

    async def get_access_token(self, grant: Grant, options: Mapping[str, Any] | None = None) -> AccessToken:
        data: Dict[str, Any] = {
            "grant_type": grant.value,
            "client_id": self._settings.client_id,
        }
        if grant is Grant.AUTHORIZATION_CODE and self._settings.redirect_uri:
            data["redirect_uri"] = self._settings.redirect_uri
        data.update(options or {})

        auth: tuple[str, str] | None = None
        if self._settings.client_secret:
            if self._settings.token_endpoint_auth_method == "client_secret_basic":
                auth = (self._settings.client_id, self._settings.client_secret)
            else:
                data["client_secret"] = self._settings.client_secret

        logger.info("token request", extra={"grant_type": grant.value})
        resp = await self.send(
            "POST",
            str(self._settings.endpoint_token),
            data=data,
            headers={"Accept": "application/json"},
            auth=auth,
        )
        payload = _safe_json(resp)
        if resp.status_code >= 400 or "error" in payload:
            raise ProviderError(
                "Token request failed",
                error=_error_code(payload),
                description=_error_description(payload, resp.text),
                status_code=resp.status_code,
                details=payload,
            )
        try:
            return AccessToken.from_dict(payload)
        except (TypeError, ValueError) as exc:
            raise ProviderError(
                "Token response did not include a usable access_token",
                error="invalid_response",
                description=str(exc),
                status_code=resp.status_code,
                details=payload,
            ) from exc

    async def get_resource_owner(self, token: AccessToken) -> ResourceOwner:
        endpoint = self._settings.endpoint_userinfo
        if not endpoint:
            raise ConfigurationError("No userinfo endpoint configured", error="configuration_error")

        resp = await self.send(
            "GET",
            endpoint,
            headers={"Accept": "application/json", "Authorization": f"Bearer {token.access_token}"},
        )
        payload = _safe_json(resp)
        if resp.status_code >= 400 or "error" in payload:
            raise ProviderError(
                "Resource owner request failed",
                error=_error_code(payload),
                description=_error_description(payload, resp.text),
                status_code=resp.status_code,
                details=payload,
            )
        return ResourceOwner(claims=payload, id_field=self._settings.resource_owner_id_field)

    async def send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Network error during {method} {url}",
                error="network_error",
                description=str(exc),
            ) from exc


class GenericProviderFactory:
    def create(self, settings: OidcSettings) -> GenericProvider:
        return GenericProvider(settings)


def _append_query(url: str, params: Mapping[str, Any]) -> str:
    parsed = urlparse(url)
    query_params = parse_qsl(parsed.query, keep_blank_values=True)
    query_params.extend((str(k), str(v)) for k, v in params.items() if v is not None)
    new_query = urlencode(query_params, doseq=True)
    return urlunparse(parsed._replace(query=new_query))


def _safe_json(resp: httpx.Response) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {"raw": resp.text}
    return data if isinstance(data, dict) else {"raw": data}


def _error_code(payload: Mapping[str, Any]) -> str | None:
    for key in ("error", "error_code", "code"):
        value = payload.get(key)
        if isinstance(value, str):
            return value
    return None


def _error_description(payload: Mapping[str, Any], default: str) -> str:
    for key in ("error_description", "message", "error_message"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return default
