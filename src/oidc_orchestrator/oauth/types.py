from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Protocol, runtime_checkable

import httpx

from oidc_orchestrator.oauth.tokens import AccessToken, Grant

if TYPE_CHECKING:
    from oidc_orchestrator.settings import OidcSettings


@dataclass(frozen=True)
class ResourceOwner:
    """Claims describing the authenticated end user."""

    claims: Dict[str, Any] = field(default_factory=dict)
    id_field: str = "sub"

    @property
    def id(self) -> Optional[str]:
        value = self.claims.get(self.id_field)
        return str(value) if value is not None else None

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.claims)


@runtime_checkable
class ProviderBinding(Protocol):
    def get_authorization_url(self, options: Mapping[str, Any]) -> str:
        ...

    def get_state(self) -> str | None:
        ...

    async def get_access_token(self, grant: Grant, options: Mapping[str, Any] | None = None) -> AccessToken:
        ...

    async def get_resource_owner(self, token: AccessToken) -> ResourceOwner:
        ...

    async def send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        ...


@runtime_checkable
class ProviderFactory(Protocol):
    def create(self, settings: "OidcSettings") -> ProviderBinding:
        ...
