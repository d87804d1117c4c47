from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from oidc_orchestrator.oauth.errors import ConfigurationError
from oidc_orchestrator.oauth.loader import import_object
from oidc_orchestrator.settings import OidcSettings


logger = logging.getLogger(__name__)


class AuthorizationEvent:
    """Published once per authorization URL.

    ``request`` and ``settings`` are read-only; listeners may rewrite ``options``.
    """

    __slots__ = ("_request", "_settings", "options")

    def __init__(self, request: Optional[Any], settings: OidcSettings, options: Optional[Dict[str, str]] = None) -> None:
        self._request = request
        self._settings = settings
        self.options: Dict[str, str] = options if options is not None else {}

    @property
    def request(self) -> Optional[Any]:
        return self._request

    @property
    def settings(self) -> OidcSettings:
        return self._settings

    def __repr__(self) -> str:
        return f"AuthorizationEvent(request={self._request!r}, options={self.options!r})"


AuthorizationListener = Callable[[AuthorizationEvent], None]


class AuthorizationHook:
    """Synchronous, ordered dispatch of :class:`AuthorizationEvent` to listeners."""

    def __init__(self, listeners: Iterable[AuthorizationListener] = ()) -> None:
        self._listeners: List[AuthorizationListener] = list(listeners)

    @classmethod
    def from_settings(cls, settings: OidcSettings) -> "AuthorizationHook":
        listeners = []
        for path in settings.authorization_listeners:
            listener = import_object(path)
            if not callable(listener):
                raise ConfigurationError(f"Authorization listener {path!r} is not callable", error="configuration_error")
            listeners.append(listener)
        return cls(listeners)

    @property
    def listeners(self) -> List[AuthorizationListener]:
        return list(self._listeners)

    def subscribe(self, listener: AuthorizationListener) -> None:
        self._listeners.append(listener)

    def dispatch(self, event: AuthorizationEvent) -> AuthorizationEvent:
        for listener in self._listeners:
            logger.debug("authorization listener %s", getattr(listener, "__name__", listener))
            listener(event)
        return event
