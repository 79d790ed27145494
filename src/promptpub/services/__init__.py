"""Business services for prompt versioning.

This module contains:
- Version storage (version_store.py)
- Version numbering and lifecycle (numbering.py, version_service.py)
- Line diff and version comparison (diff_engine.py, comparison.py)
- Prompt-level operations (prompt_service.py)
- Workspace access checks (access.py)

Naming convention:
- *_service.py: Business logic layer
- *_store.py: Persistence layer
"""

from .access import AccessPolicy, AllowAllAccessPolicy, StaticMembershipAccessPolicy, WorkspaceRole
from .comparison import ComparisonSelector
from .diff_engine import compute_diff
from .numbering import next_version_label
from .prompt_service import PromptService
from .version_service import VersionLifecycleManager, merge_auxiliary
from .version_store import SQLAlchemyVersionStore, VersionStore

__all__ = [
    "AccessPolicy",
    "AllowAllAccessPolicy",
    "StaticMembershipAccessPolicy",
    "WorkspaceRole",
    "ComparisonSelector",
    "compute_diff",
    "next_version_label",
    "PromptService",
    "VersionLifecycleManager",
    "merge_auxiliary",
    "SQLAlchemyVersionStore",
    "VersionStore",
]
