"""PromptPub - versioned prompt management with line-level comparison."""

__version__ = "0.1.0"

from .core.config import settings

__all__ = ["settings"]
