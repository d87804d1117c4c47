from __future__ import annotations

from typing import Any, Optional

from oidc_orchestrator.oauth.events import AuthorizationEvent


DEFAULT_LANGUAGE = "en"


def set_authorization_language(event: AuthorizationEvent) -> None:
    """Localize the provider's login prompt.

    Writes the language of the current site into the option named by
    ``authorize_language_parameter``; without a request the language is "en".
    """
    option = event.settings.authorize_language_parameter
    if not option:
        return
    event.options[option] = resolve_language_code(event.request)


def resolve_language_code(request: Optional[Any]) -> str:
    """Language code from ``request.state.language`` or the site's default language.

    The language may be a site-language object exposing ``locale.language_code``,
    a locale object exposing ``language_code``, or a plain code such as "de" or
    "de-CH".
    """
    if request is None:
        return DEFAULT_LANGUAGE
    state = getattr(request, "state", None)
    language = getattr(state, "language", None)
    if language is None:
        site = getattr(state, "site", None)
        language = getattr(site, "default_language", None)
    return _language_code(language) or DEFAULT_LANGUAGE


def _language_code(language: Any) -> Optional[str]:
    if language is None:
        return None
    if isinstance(language, str):
        code = language.replace("_", "-").split("-")[0].strip().lower()
        return code or None
    locale = getattr(language, "locale", language)
    code = getattr(locale, "language_code", None)
    if isinstance(code, str) and code:
        return code
    return None
