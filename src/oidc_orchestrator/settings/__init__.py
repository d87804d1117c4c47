from oidc_orchestrator.settings.config import OidcSettings, Settings, get_settings

__all__ = ["OidcSettings", "Settings", "get_settings"]
