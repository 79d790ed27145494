"""Router configuration and registration."""

from fastapi import FastAPI
import structlog

from ..api.routers import diff, health, prompts

logger = structlog.get_logger(__name__)


def configure_routes(app: FastAPI) -> None:
    """Configure all routes for the application."""
    app.include_router(health.router)
    app.include_router(prompts.router)
    app.include_router(diff.router)

    logger.info("Core routes configured", routes=["health", "prompts", "diff"])
