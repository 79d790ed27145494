"""API routers for PromptPub."""

from . import diff, health, prompts

__all__ = ["diff", "health", "prompts"]
