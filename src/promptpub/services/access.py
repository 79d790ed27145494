"""Workspace access checks.

Membership and roles live outside this service; the versioning engine only
asks an ``AccessPolicy`` whether a user may view or edit a workspace.
"""

from enum import Enum
from typing import Dict, Optional, Protocol, Tuple

import structlog

from ..core.exceptions import PermissionDeniedError

logger = structlog.get_logger(__name__)


class WorkspaceRole(str, Enum):
    """Workspace member roles, weakest first."""
    VIEWER = "viewer"
    EDITOR = "editor"
    OWNER = "owner"


ROLE_HIERARCHY = {
    WorkspaceRole.OWNER: 3,
    WorkspaceRole.EDITOR: 2,
    WorkspaceRole.VIEWER: 1,
}


class AccessPolicy(Protocol):
    """Interface for workspace authorization."""

    async def ensure_can_view(self, user_id: str, workspace_id: str) -> None:
        """Raise ``PermissionDeniedError`` unless the user may read the workspace."""
        ...

    async def ensure_can_edit(self, user_id: str, workspace_id: str) -> None:
        """Raise ``PermissionDeniedError`` unless the user may modify the workspace."""
        ...


class AllowAllAccessPolicy:
    """Grants everything. Used when authorization is enforced upstream."""

    async def ensure_can_view(self, user_id: str, workspace_id: str) -> None:
        return None

    async def ensure_can_edit(self, user_id: str, workspace_id: str) -> None:
        return None


class StaticMembershipAccessPolicy:
    """Role checks against a fixed ``(workspace_id, user_id) -> role`` map."""

    def __init__(self, memberships: Optional[Dict[Tuple[str, str], WorkspaceRole]] = None):
        self._memberships: Dict[Tuple[str, str], WorkspaceRole] = dict(memberships or {})

    def grant(self, workspace_id: str, user_id: str, role: WorkspaceRole) -> None:
        self._memberships[(workspace_id, user_id)] = WorkspaceRole(role)

    def role_of(self, user_id: str, workspace_id: str) -> Optional[WorkspaceRole]:
        return self._memberships.get((workspace_id, user_id))

    async def ensure_can_view(self, user_id: str, workspace_id: str) -> None:
        self._require(user_id, workspace_id, WorkspaceRole.VIEWER, action="view")

    async def ensure_can_edit(self, user_id: str, workspace_id: str) -> None:
        self._require(user_id, workspace_id, WorkspaceRole.EDITOR, action="edit")

    def _require(
        self, user_id: str, workspace_id: str, required: WorkspaceRole, action: str
    ) -> None:
        role = self.role_of(user_id, workspace_id)
        if role is None or ROLE_HIERARCHY[role] < ROLE_HIERARCHY[required]:
            logger.warning(
                "Workspace access denied",
                user_id=user_id,
                workspace_id=workspace_id,
                role=role.value if role else None,
                required_role=required.value,
            )
            raise PermissionDeniedError(
                f"User '{user_id}' may not {action} workspace '{workspace_id}'",
                resource=f"workspace:{workspace_id}",
                action=action,
            )
