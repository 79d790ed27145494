"""Line diff Pydantic models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class DiffLineType(str, Enum):
    """Kind of a diff entry."""
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


class LineNumbers(BaseModel):
    """1-based line numbers of an entry on each side that has it."""
    old: Optional[int] = None
    new: Optional[int] = None


class DiffLine(BaseModel):
    """One line-level diff entry."""
    type: DiffLineType
    content: str
    line_number: LineNumbers


class DiffResult(BaseModel):
    """Ordered diff entries with at-a-glance counts."""
    lines: List[DiffLine] = Field(default_factory=list)
    added: int = 0
    removed: int = 0
    unchanged: int = 0


class DiffTextRequest(BaseModel):
    """Request body for diffing two free-form texts."""
    old_text: str = ""
    new_text: str = ""


class VersionComparison(BaseModel):
    """Diff between two versions of one prompt, oldest first."""
    prompt_id: str
    old_version_id: str
    old_version: str
    new_version_id: str
    new_version: str
    diff: DiffResult
