from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from oidc_orchestrator.settings import get_settings
from oidc_orchestrator.api import auth_router, system_router
from oidc_orchestrator.middleware import RequestIDMiddleware
from oidc_orchestrator.app.exceptions import register_exception_handlers
from oidc_orchestrator.app.logging_config import configure_logging
from oidc_orchestrator.app.metrics import instrument_metrics


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="OAuth 2.0 / OpenID Connect client orchestrator",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.server.debug,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins(),
        allow_credentials=True,
        allow_methods=settings.cors.methods(),
        allow_headers=settings.cors.headers(),
    )

    # Sessions
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session.secret_key,
        session_cookie=settings.session.cookie_name,
        same_site="lax",
        https_only=settings.session.https_only,
    )

    # Routers
    app.include_router(system_router)
    app.include_router(auth_router)

    # Middleware
    app.add_middleware(RequestIDMiddleware)

    # Exceptions, logging, metrics
    register_exception_handlers(app)
    configure_logging(settings.logging.as_json, settings.server.log_level)
    instrument_metrics(app)

    return app
