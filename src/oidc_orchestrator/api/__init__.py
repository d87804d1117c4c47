from oidc_orchestrator.api.auth import router as auth_router
from oidc_orchestrator.api.system import router as system_router

__all__ = ["auth_router", "system_router"]
