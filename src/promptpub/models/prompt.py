"""Database models for prompts and their versions."""

import json
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from ..core.database import Base
from .versions import VersionAuxiliary, VersionState


def utcnow() -> datetime:
    """Return current UTC datetime without timezone info."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_id() -> str:
    return uuid.uuid4().hex


class Prompt(Base):
    """A prompt document owning a chain of versions."""

    __tablename__ = "prompts"

    id = Column(String(32), primary_key=True, default=_new_id)
    workspace_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="draft")  # draft, published, archived
    visibility = Column(String(20), nullable=False, default="workspace")  # private, workspace, public

    # Points at the single version in state "current"; no FK to avoid a cycle
    current_version_id = Column(String(32), nullable=True)

    creator_id = Column(String(64), nullable=False)
    usage_count = Column(Integer, nullable=False, default=0)
    last_used_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Prompt(id={self.id}, current_version={self.current_version_id})>"


class PromptVersion(Base):
    """One immutable snapshot of a prompt's content.

    Auxiliary fields are stored as JSON text; ``variables`` and
    ``target_models`` decode them and ``auxiliary`` returns the typed form.
    """

    __tablename__ = "prompt_versions"
    __table_args__ = (
        Index("ix_prompt_versions_prompt_created", "prompt_id", "created_at"),
    )

    id = Column(String(32), primary_key=True, default=_new_id)
    prompt_id = Column(
        String(32),
        ForeignKey("prompts.id", ondelete="CASCADE"),
        nullable=False,
    )
    version = Column(String(32), nullable=False)  # v1.0, v1.1, ...
    content = Column(Text, nullable=False)

    variables_json = Column("variables", Text, nullable=True)
    output_example = Column(Text, nullable=True)
    target_models_json = Column("target_models", Text, nullable=True)

    changelog = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=VersionState.CURRENT.value)
    creator_id = Column(String(64), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    @property
    def variables(self) -> Optional[List[dict]]:
        if self.variables_json is None:
            return None
        return json.loads(self.variables_json)

    @property
    def target_models(self) -> Optional[List[str]]:
        if self.target_models_json is None:
            return None
        return json.loads(self.target_models_json)

    @property
    def auxiliary(self) -> VersionAuxiliary:
        """Typed auxiliary fields, every field marked as supplied."""
        return VersionAuxiliary(
            variables=self.variables,
            output_example=self.output_example,
            target_models=self.target_models,
        )

    def set_auxiliary(self, auxiliary: VersionAuxiliary) -> None:
        """Serialize typed auxiliary fields into their storage columns."""
        if auxiliary.variables is None:
            self.variables_json = None
        else:
            self.variables_json = json.dumps(
                [variable.model_dump(exclude_none=True) for variable in auxiliary.variables]
            )
        self.output_example = auxiliary.output_example
        if auxiliary.target_models is None:
            self.target_models_json = None
        else:
            self.target_models_json = json.dumps(list(auxiliary.target_models))

    def __repr__(self):
        return f"<PromptVersion(id={self.id}, prompt={self.prompt_id}, version={self.version})>"


class UsageLog(Base):
    """A single recorded use of a prompt."""

    __tablename__ = "usage_logs"

    id = Column(String(32), primary_key=True, default=_new_id)
    prompt_id = Column(
        String(32),
        ForeignKey("prompts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version_id = Column(String(32), nullable=True)
    user_id = Column(String(64), nullable=True)
    source = Column(String(20), nullable=False, default="web")  # web, api, plugin
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<UsageLog(prompt={self.prompt_id}, version={self.version_id})>"
