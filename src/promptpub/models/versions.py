"""Prompt version Pydantic models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class VersionState(str, Enum):
    """Lifecycle state of a prompt version."""
    CURRENT = "current"
    HISTORY = "history"
    EXPERIMENTAL = "experimental"


class VariableDefinition(BaseModel):
    """A template variable declared by a prompt version."""
    name: str = Field(min_length=1)
    description: Optional[str] = None
    default_value: Optional[str] = None


class VersionAuxiliary(BaseModel):
    """Structured metadata carried along with version content.

    Only fields present in ``model_fields_set`` count as supplied; the rest
    are carried forward from the previous version when merging.
    """
    variables: Optional[List[VariableDefinition]] = None
    output_example: Optional[str] = None
    target_models: Optional[List[str]] = None


AUXILIARY_FIELDS = tuple(VersionAuxiliary.model_fields)


class VersionRead(BaseModel):
    """A stored prompt version."""
    id: str
    prompt_id: str
    version: str
    content: str
    variables: Optional[List[VariableDefinition]] = None
    output_example: Optional[str] = None
    target_models: Optional[List[str]] = None
    changelog: Optional[str] = None
    status: VersionState
    creator_id: str
    created_at: datetime

    class Config:
        """Pydantic configuration."""
        from_attributes = True


class VersionCreated(BaseModel):
    """Response for operations that produce a new current version."""
    prompt_id: str
    version_id: str
    version: str
    changelog: Optional[str] = None


class VersionHistory(BaseModel):
    """All versions of a prompt, newest first."""
    prompt_id: str
    current_version_id: Optional[str] = None
    total: int
    versions: List[VersionRead] = Field(default_factory=list)
