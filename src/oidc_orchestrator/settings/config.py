from __future__ import annotations

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version as pkg_version
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PROVIDER_FACTORY = "oidc_orchestrator.oauth.provider:GenericProviderFactory"
DEFAULT_LISTENERS = ["oidc_orchestrator.oauth.listeners:set_authorization_language"]


def _package_version(default: str = "0.1.0") -> str:
    try:
        return pkg_version("oidc-orchestrator")
    except PackageNotFoundError:
        return default


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    reload: bool = True
    log_level: Literal["critical", "error", "warning", "info", "debug", "trace"] = "info"


class CorsSettings(BaseModel):
    allow_origins: str = "*"  # comma-separated or "*"
    allow_methods: str = "GET,POST"  # comma-separated
    allow_headers: str = "*"  # comma-separated or "*"

    def origins(self) -> List[str]:
        return _split(self.allow_origins, wildcard=True)

    def methods(self) -> List[str]:
        return [part.upper() for part in _split(self.allow_methods)]

    def headers(self) -> List[str]:
        return _split(self.allow_headers, wildcard=True)


class SessionSettings(BaseModel):
    secret_key: str = "dev-secret-change-me"
    cookie_name: str = "oidc_orchestrator_session"
    https_only: bool = True


class OidcSettings(BaseModel):
    """Client credentials, provider endpoints and behavioural flags.

    Instances are immutable; the orchestrator derives an effective copy with the
    redirect URI resolved instead of mutating the one it was given.
    """

    model_config = ConfigDict(frozen=True)

    # OAuth client
    client_id: str = ""
    client_secret: Optional[str] = None
    scopes: str = "openid"  # space separated
    token_endpoint_auth_method: Literal["client_secret_post", "client_secret_basic"] = "client_secret_post"

    # Provider endpoints
    endpoint_authorize: Optional[str] = None
    endpoint_token: Optional[str] = None
    endpoint_userinfo: Optional[str] = None
    endpoint_revoke: Optional[str] = None
    resource_owner_id_field: str = "sub"

    # Redirect URI; derived from site_url + redirect_path when unset
    redirect_uri: Optional[str] = None
    site_url: HttpUrl = HttpUrl("https://localhost:8000")
    redirect_path: str = "/auth/callback"

    # Extension points
    provider_factory: str = DEFAULT_PROVIDER_FACTORY
    authorization_listeners: List[str] = Field(default_factory=lambda: list(DEFAULT_LISTENERS))
    authorize_language_parameter: Optional[str] = None  # e.g. "ui_locales"

    use_pkce: bool = False
    http_timeout: float = 10.0

    def site_redirect_uri(self) -> str:
        return f"{str(self.site_url).rstrip('/')}{self.redirect_path}"


class LoggingSettings(BaseModel):
    as_json: bool = False


class Settings(BaseSettings):
    """Application settings loaded from environment (and .env)."""

    # App metadata
    app_name: str = "OIDC Orchestrator"
    app_version: str = Field(default_factory=_package_version)

    # Groups
    server: ServerSettings = ServerSettings()
    cors: CorsSettings = CorsSettings()
    session: SessionSettings = SessionSettings()
    oidc: OidcSettings = OidcSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_prefix="OIDC_ORCHESTRATOR_",
        env_nested_delimiter="__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


def _split(value: str, wildcard: bool = False) -> List[str]:
    value = value.strip()
    if wildcard and value in ("", "*"):
        return ["*"]
    return [part.strip() for part in value.split(",") if part.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
