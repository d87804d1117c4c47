"""
Main entry point for the OIDC Orchestrator application.
"""
import logging

from dotenv import load_dotenv
import uvicorn
from oidc_orchestrator.app import create_app
from oidc_orchestrator.settings import get_settings

# Load environment variables from a .env file if present
load_dotenv()

# Create the FastAPI application
app = create_app()

logger = logging.getLogger("oidc_orchestrator")


def main() -> None:
    """Main entry point for running the application."""
    s = get_settings()
    logger.info(
        "starting on %s:%s (authorize=%s, redirect=%s)",
        s.server.host,
        s.server.port,
        s.oidc.endpoint_authorize,
        s.oidc.redirect_uri or s.oidc.site_redirect_uri(),
    )
    uvicorn.run(
        "oidc_orchestrator.main:app",
        host=s.server.host,
        port=s.server.port,
        reload=s.server.reload,
        log_level=s.server.log_level,
    )


if __name__ == "__main__":
    main()
