from types import SimpleNamespace

import pytest
from starlette.requests import Request

from conftest import make_settings
from oidc_orchestrator.oauth import AuthorizationEvent, AuthorizationHook, ConfigurationError
from oidc_orchestrator.oauth.listeners import resolve_language_code, set_authorization_language


def _request(**state) -> Request:
    request = Request({"type": "http", "method": "GET", "path": "/auth/login", "headers": [], "query_string": b""})
    for key, value in state.items():
        setattr(request.state, key, value)
    return request


def _site_language(code: str):
    return SimpleNamespace(locale=SimpleNamespace(language_code=code))


def test_language_defaults_to_english_without_request():
    event = AuthorizationEvent(None, make_settings(authorize_language_parameter="ui_locales"), {})
    set_authorization_language(event)
    assert event.options == {"ui_locales": "en"}


def test_language_from_request_site_language():
    settings = make_settings(authorize_language_parameter="ui_locales")
    event = AuthorizationEvent(_request(language=_site_language("de")), settings, {"scope": "openid"})
    set_authorization_language(event)
    assert event.options == {"scope": "openid", "ui_locales": "de"}


def test_language_falls_back_to_site_default_language():
    site = SimpleNamespace(default_language=_site_language("fr"))
    assert resolve_language_code(_request(site=site)) == "fr"


@pytest.mark.parametrize(
    "language, expected",
    [
        ("de-CH", "de"),
        ("pt_BR", "pt"),
        (SimpleNamespace(language_code="it"), "it"),
        (SimpleNamespace(locale=None), "en"),
    ],
)
def test_language_codes_and_missing_locale(language, expected):
    assert resolve_language_code(_request(language=language)) == expected


def test_request_without_language_information():
    assert resolve_language_code(_request()) == "en"
    assert resolve_language_code(SimpleNamespace()) == "en"


def test_listener_is_noop_without_language_parameter():
    event = AuthorizationEvent(None, make_settings(), {"scope": "openid"})
    set_authorization_language(event)
    assert event.options == {"scope": "openid"}


def test_hook_runs_listeners_in_order():
    calls = []

    def first(event):
        calls.append("first")
        event.options["prompt"] = "login"

    def second(event):
        calls.append("second")
        event.options["prompt"] = "consent"

    hook = AuthorizationHook([first])
    hook.subscribe(second)
    event = hook.dispatch(AuthorizationEvent(None, make_settings(), {}))

    assert calls == ["first", "second"]
    assert event.options == {"prompt": "consent"}


def test_hook_from_settings_resolves_default_listener():
    hook = AuthorizationHook.from_settings(make_settings())
    assert hook.listeners == [set_authorization_language]


def test_hook_from_settings_rejects_unknown_listener():
    with pytest.raises(ConfigurationError):
        AuthorizationHook.from_settings(make_settings(authorization_listeners=["oidc_orchestrator.nope:listener"]))


def test_event_request_and_settings_are_read_only():
    settings = make_settings()
    request = _request()
    event = AuthorizationEvent(request, settings, {"scope": "openid"})

    with pytest.raises(AttributeError):
        event.settings = make_settings(authorize_language_parameter="ui_locales")
    with pytest.raises(AttributeError):
        event.request = None

    event.options = {"prompt": "login"}
    assert event.settings is settings
    assert event.request is request
    assert event.options == {"prompt": "login"}


def test_later_listeners_see_original_settings():
    settings = make_settings()
    seen = []

    def swap_settings(event):
        try:
            event.settings = make_settings(authorize_language_parameter="other")
        except AttributeError:
            event.options["swap"] = "refused"

    hook = AuthorizationHook([swap_settings, lambda event: seen.append(event.settings)])
    event = hook.dispatch(AuthorizationEvent(None, settings))

    assert seen == [settings]
    assert seen[0] is settings
    assert event.options == {"swap": "refused"}
