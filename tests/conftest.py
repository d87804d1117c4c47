import pytest

from oidc_orchestrator.oauth import GenericProvider
from oidc_orchestrator.settings import OidcSettings


IDP = "https://idp.example.com"
AUTHORIZE_URL = f"{IDP}/oauth2/authorize"
TOKEN_URL = f"{IDP}/oauth2/token"
USERINFO_URL = f"{IDP}/oauth2/userinfo"
REVOKE_URL = f"{IDP}/oauth2/revoke"
REDIRECT_URI = "https://app.example.com/auth/callback"


def make_settings(**overrides) -> OidcSettings:
    values = dict(
        client_id="client-1",
        client_secret="s3cret",
        scopes="openid profile",
        endpoint_authorize=AUTHORIZE_URL,
        endpoint_token=TOKEN_URL,
        endpoint_userinfo=USERINFO_URL,
        endpoint_revoke=REVOKE_URL,
        redirect_uri=REDIRECT_URI,
    )
    values.update(overrides)
    return OidcSettings(**values)


class CountingFactory:
    def __init__(self):
        self.created = []

    def create(self, settings: OidcSettings) -> GenericProvider:
        self.created.append(settings)
        return GenericProvider(settings)


@pytest.fixture
def settings() -> OidcSettings:
    return make_settings()


@pytest.fixture
def factory() -> CountingFactory:
    return CountingFactory()
