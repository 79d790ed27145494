"""Prompt-level Pydantic models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, validator

from .versions import AUXILIARY_FIELDS, VariableDefinition, VersionAuxiliary, VersionRead


class PromptStatus(str, Enum):
    """Publication status of a prompt."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class PromptVisibility(str, Enum):
    """Who may see a prompt."""
    PRIVATE = "private"
    WORKSPACE = "workspace"
    PUBLIC = "public"


class UsageSource(str, Enum):
    """Where a prompt was used from."""
    WEB = "web"
    API = "api"
    PLUGIN = "plugin"


class _AuxiliaryInput(BaseModel):
    """Request mixin for the auxiliary version fields."""
    variables: Optional[List[VariableDefinition]] = None
    output_example: Optional[str] = None
    target_models: Optional[List[str]] = None

    def auxiliary(self) -> VersionAuxiliary:
        """Only the auxiliary fields the caller actually sent."""
        supplied = {
            name: getattr(self, name)
            for name in AUXILIARY_FIELDS
            if name in self.model_fields_set
        }
        return VersionAuxiliary(**supplied)


class PromptCreateRequest(_AuxiliaryInput):
    """Request model for creating a prompt and its first version."""
    workspace_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: Optional[str] = None
    content: str = Field(min_length=1)
    status: PromptStatus = PromptStatus.DRAFT
    visibility: PromptVisibility = PromptVisibility.WORKSPACE

    @validator("status")
    def validate_status(cls, v):
        """New prompts cannot start archived."""
        if v == PromptStatus.ARCHIVED:
            raise ValueError("A new prompt must be draft or published")
        return v


class PromptUpdateRequest(_AuxiliaryInput):
    """Request model for editing a prompt.

    Supplying ``content`` creates a new version; the other fields update the
    prompt in place.
    """
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    content: Optional[str] = Field(default=None, min_length=1)
    status: Optional[PromptStatus] = None
    visibility: Optional[PromptVisibility] = None
    changelog: Optional[str] = None


class InitialVersionRequest(_AuxiliaryInput):
    """Request model for the first version of a prompt created without one."""
    content: str = Field(min_length=1)


class PromptCopyRequest(BaseModel):
    """Request model for copying a prompt, optionally into another workspace."""
    workspace_id: Optional[str] = None


class UsageRecordRequest(BaseModel):
    """Request model for recording a prompt use."""
    source: UsageSource = UsageSource.WEB


class PromptRead(BaseModel):
    """A prompt with its current version."""
    id: str
    workspace_id: str
    title: str
    description: Optional[str] = None
    status: PromptStatus
    visibility: PromptVisibility
    current_version_id: Optional[str] = None
    creator_id: str
    usage_count: int = 0
    last_used_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    current_version: Optional[VersionRead] = None

    class Config:
        """Pydantic configuration."""
        from_attributes = True


class PromptCreated(BaseModel):
    """Response for prompt creation and copy."""
    id: str
    version_id: Optional[str] = None
    version: Optional[str] = None


class PromptUpdated(BaseModel):
    """Response for prompt edits."""
    id: str
    version_id: Optional[str] = None
    version: Optional[str] = None
    new_version_created: bool = False


class UsageRecorded(BaseModel):
    """Response for a recorded prompt use."""
    prompt_id: str
    version_id: Optional[str] = None
    usage_count: int
