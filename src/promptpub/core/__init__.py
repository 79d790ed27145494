"""Core configuration and settings."""

from .config import settings
from .exceptions import DatabaseError, PromptPubError
from .logging import setup_logging

__all__ = ["settings", "DatabaseError", "PromptPubError", "setup_logging"]
