"""FastAPI application and route handlers."""

from .routers import diff, health, prompts

__all__ = ["diff", "health", "prompts"]
