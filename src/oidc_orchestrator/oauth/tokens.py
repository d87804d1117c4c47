from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


# Below this an "expires" value is a lifetime in seconds, not a timestamp.
_TEN_YEARS = 60 * 60 * 24 * 365 * 10

_RESERVED = ("access_token", "refresh_token", "expires", "expires_in", "resource_owner_id")


class Grant(str, Enum):
    AUTHORIZATION_CODE = "authorization_code"
    PASSWORD = "password"
    CLIENT_CREDENTIALS = "client_credentials"
    REFRESH_TOKEN = "refresh_token"


@dataclass(frozen=True)
class AccessToken:
    """Bearer credential issued by the provider.

    ``expires`` is an absolute unix timestamp; ``None`` means the token never
    expires. Provider-specific members (``token_type``, ``id_token``, ``scope``
    ...) are kept in ``values`` so that serialization round-trips.
    """

    access_token: str
    refresh_token: Optional[Any] = None
    expires: Optional[int] = None
    resource_owner_id: Optional[Any] = None
    values: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, now: Optional[float] = None) -> "AccessToken":
        access_token = data.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("Required option not passed: access_token")

        current = int(now if now is not None else time.time())
        expires: Optional[int] = None
        try:
            if data.get("expires_in"):
                expires = current + int(data["expires_in"])
            elif data.get("expires"):
                expires = int(data["expires"])
                if expires < _TEN_YEARS:
                    expires += current
        except OverflowError as exc:
            raise ValueError(f"Invalid token expiry: {exc}") from exc

        return cls(
            access_token=access_token,
            refresh_token=data.get("refresh_token") or None,
            expires=expires,
            resource_owner_id=data.get("resource_owner_id"),
            values={k: v for k, v in data.items() if k not in _RESERVED},
        )

    @classmethod
    def from_json(cls, serialized: str) -> "AccessToken":
        data = json.loads(serialized)
        if not isinstance(data, dict):
            raise ValueError("Serialized token must be a JSON object")
        return cls.from_dict(data)

    def has_expired(self, now: Optional[float] = None) -> bool:
        if self.expires is None:
            return False
        return self.expires < (now if now is not None else time.time())

    def with_refresh_token(self, refresh_token: Optional[Any]) -> "AccessToken":
        return AccessToken(
            access_token=self.access_token,
            refresh_token=refresh_token,
            expires=self.expires,
            resource_owner_id=self.resource_owner_id,
            values=dict(self.values),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"access_token": self.access_token}
        if self.refresh_token:
            data["refresh_token"] = self.refresh_token
        if self.expires:
            data["expires"] = self.expires
        if self.resource_owner_id is not None:
            data["resource_owner_id"] = self.resource_owner_id
        data.update(self.values)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def __str__(self) -> str:
        return self.access_token
