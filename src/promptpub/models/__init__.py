"""Database and Pydantic models for PromptPub."""

from .diff import DiffLine, DiffLineType, DiffResult, LineNumbers, VersionComparison
from .prompt import Prompt, PromptVersion, UsageLog
from .prompts import (
    PromptCreateRequest,
    PromptRead,
    PromptStatus,
    PromptUpdateRequest,
    PromptVisibility,
    UsageSource,
)
from .versions import VariableDefinition, VersionAuxiliary, VersionRead, VersionState

__all__ = [
    "DiffLine",
    "DiffLineType",
    "DiffResult",
    "LineNumbers",
    "VersionComparison",
    "Prompt",
    "PromptVersion",
    "UsageLog",
    "PromptCreateRequest",
    "PromptRead",
    "PromptStatus",
    "PromptUpdateRequest",
    "PromptVisibility",
    "UsageSource",
    "VariableDefinition",
    "VersionAuxiliary",
    "VersionRead",
    "VersionState",
]
