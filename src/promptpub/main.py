"""Main FastAPI application entry point."""

from typing import Any, Dict, Optional

from fastapi import FastAPI
import structlog

from .core.config import settings
from .core.logging import setup_logging
from .core.lifespan import lifespan
from .core.middleware import configure_middleware
from .core.handlers import configure_exception_handlers
from .core.routes import configure_routes
from .services.access import AccessPolicy

# Setup logging
setup_logging()
logger = structlog.get_logger(__name__)


def create_app(access_policy: Optional[AccessPolicy] = None) -> FastAPI:
    """Build the application.

    Args:
        access_policy: Workspace authorization; every request is allowed when omitted
    """
    app = FastAPI(
        title="PromptPub",
        description="📝 Versioned prompt management for shared workspaces",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment == "development" or settings.debug else None,
        redoc_url="/redoc" if settings.environment == "development" or settings.debug else None,
        license_info={
            "name": "MIT",
            "url": "https://opensource.org/licenses/MIT",
        },
    )
    app.state.access_policy = access_policy

    configure_middleware(app)
    configure_exception_handlers(app)
    configure_routes(app)

    @app.get("/", response_model=Dict[str, Any])
    async def root() -> Dict[str, Any]:
        """🏠 Root endpoint with service information."""
        return {
            "service": "PromptPub",
            "description": "📝 Versioned prompt management for shared workspaces",
            "version": settings.app_version,
            "environment": settings.environment,
            "status": "running",
            "endpoints": {
                "health": "/health",
                "detailed_health": "/health/detailed",
                "prompts": "/api/prompts",
                "diff": "/api/diff",
                "docs": "/docs" if settings.debug or settings.environment == "development" else "disabled",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(
        "🚀 Starting PromptPub from main",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

    uvicorn.run(
        "promptpub.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
