import time

import pytest

from oidc_orchestrator.oauth import AccessToken


def test_expires_in_becomes_absolute_timestamp():
    token = AccessToken.from_dict({"access_token": "at", "expires_in": 3600}, now=1_700_000_000)
    assert token.expires == 1_700_003_600
    assert not token.has_expired(now=1_700_000_000)
    assert token.has_expired(now=1_700_003_601)


def test_small_expires_value_is_relative():
    token = AccessToken.from_dict({"access_token": "at", "expires": 120}, now=1_700_000_000)
    assert token.expires == 1_700_000_120


def test_token_without_expiry_never_expires():
    token = AccessToken.from_dict({"access_token": "at", "expires_in": 0})
    assert token.expires is None
    assert not token.has_expired(now=time.time() + 10**9)


def test_missing_access_token_is_rejected():
    with pytest.raises(ValueError):
        AccessToken.from_dict({"refresh_token": "rt"})


def test_serialized_form_keeps_provider_values():
    data = {
        "access_token": "at",
        "refresh_token": "rt",
        "expires": int(time.time()) + 600,
        "resource_owner_id": "42",
        "token_type": "Bearer",
        "id_token": "header.payload.sig",
    }
    token = AccessToken.from_json(AccessToken.from_dict(data).to_json())
    assert token.to_dict() == data
    assert token.values == {"token_type": "Bearer", "id_token": "header.payload.sig"}
    assert str(token) == "at"


@pytest.mark.parametrize(
    "data",
    [
        {"access_token": "at", "expires": float("inf")},
        {"access_token": "at", "expires_in": float("inf")},
        {"access_token": "at", "expires_in": float("nan")},
    ],
)
def test_non_finite_expiry_is_rejected(data):
    with pytest.raises(ValueError):
        AccessToken.from_dict(data)


def test_owner_id_and_refresh_token_keep_their_json_type():
    data = {"access_token": "at", "refresh_token": "rt", "resource_owner_id": 42}
    token = AccessToken.from_json(AccessToken.from_dict(data).to_json())
    assert token.resource_owner_id == 42
    assert token.to_dict() == data


def test_serialized_token_must_be_an_object():
    with pytest.raises(ValueError):
        AccessToken.from_json('["at"]')
