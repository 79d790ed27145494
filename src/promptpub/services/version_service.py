"""Prompt version lifecycle: initial creation, revision and rollback."""

from typing import List, Optional, Tuple

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from ..core.config import settings
from ..core.exceptions import InvalidInputError, NotFoundError, VersionConflictError
from ..core.logging import log_version_transition
from ..models.prompt import Prompt, PromptVersion
from ..models.prompts import PromptVisibility
from ..models.versions import VersionAuxiliary, VersionState
from .access import AccessPolicy, AllowAllAccessPolicy
from .numbering import INITIAL_VERSION_LABEL, next_version_label
from .version_store import SQLAlchemyVersionStore, VersionStore, next_created_at

logger = structlog.get_logger(__name__)

INITIAL_CHANGELOG = "initial version"
ROLLBACK_CHANGELOG = "rolled back to {version}"


def merge_auxiliary(
    previous: Optional[VersionAuxiliary], update: Optional[VersionAuxiliary]
) -> VersionAuxiliary:
    """Build the auxiliary fields of a new version.

    Fields explicitly set on ``update`` win (an explicit ``None`` clears the
    field); everything else is carried forward from ``previous``.
    """
    merged = previous.model_dump() if previous is not None else {}
    if update is not None:
        merged.update(update.model_dump(include=update.model_fields_set))
    return VersionAuxiliary(**merged)


class VersionLifecycleManager:
    """Owns every state transition of a prompt's versions.

    Each public mutation runs as a single transaction: superseding the old
    current version, inserting the new one and moving the prompt's pointer
    either all happen or none do. The pointer move is a compare-and-swap
    against the value read at the start, so a concurrent writer that got
    there first turns this call into a ``VersionConflictError``.
    """

    def __init__(
        self,
        db: AsyncSession,
        access_policy: Optional[AccessPolicy] = None,
        store: Optional[VersionStore] = None,
    ):
        self.store = store or SQLAlchemyVersionStore(db)
        self.access_policy = access_policy or AllowAllAccessPolicy()

    async def create_initial(
        self,
        prompt_id: str,
        content: str,
        creator_id: str,
        auxiliary: Optional[VersionAuxiliary] = None,
    ) -> PromptVersion:
        """Create ``v1.0`` for a prompt that has no versions yet."""
        async with self.store.transaction():
            prompt = await self.require_prompt(prompt_id)
            await self.access_policy.ensure_can_edit(creator_id, prompt.workspace_id)

            if await self.store.count_versions(prompt_id) > 0:
                raise InvalidInputError(
                    f"Prompt '{prompt_id}' already has versions",
                    field="prompt_id",
                    value=prompt_id,
                )

            return await self.append_version(
                prompt,
                content=content,
                auxiliary=auxiliary,
                changelog=INITIAL_CHANGELOG,
                creator_id=creator_id,
                action="create",
            )

    async def revise(
        self,
        prompt_id: str,
        creator_id: str,
        content: Optional[str] = None,
        auxiliary: Optional[VersionAuxiliary] = None,
        changelog: Optional[str] = None,
    ) -> Optional[PromptVersion]:
        """Record new content as the prompt's current version.

        Returns ``None`` without touching anything when ``content`` is not
        supplied. Content identical to the current version still produces a
        new version.
        """
        async with self.store.transaction():
            prompt = await self.require_prompt(prompt_id)
            await self.access_policy.ensure_can_edit(creator_id, prompt.workspace_id)

            if content is None:
                return None

            return await self.append_version(
                prompt,
                content=content,
                auxiliary=auxiliary,
                changelog=changelog,
                creator_id=creator_id,
                action="revise",
            )

    async def rollback(self, prompt_id: str, target_version_id: str, creator_id: str) -> PromptVersion:
        """Create a new current version copying a previous version verbatim.

        The target version itself is left untouched.
        """
        async with self.store.transaction():
            prompt = await self.require_prompt(prompt_id)
            await self.access_policy.ensure_can_edit(creator_id, prompt.workspace_id)

            target = await self.require_version(prompt_id, target_version_id)

            return await self.append_version(
                prompt,
                content=target.content,
                auxiliary=target.auxiliary,
                changelog=ROLLBACK_CHANGELOG.format(version=target.version),
                creator_id=creator_id,
                action="rollback",
                carry_forward=False,
                rolled_back_to=target.id,
            )

    async def version_history(
        self, prompt_id: str, user_id: Optional[str] = None
    ) -> Tuple[Prompt, List[PromptVersion]]:
        """The prompt together with all its versions, newest first."""
        prompt = await self.require_prompt(prompt_id)
        await self.ensure_can_view(prompt, user_id)
        return prompt, await self.store.list_versions(prompt_id)

    async def list_versions(self, prompt_id: str, user_id: Optional[str] = None) -> List[PromptVersion]:
        """All versions of a prompt, newest first."""
        _, versions = await self.version_history(prompt_id, user_id)
        return versions

    async def get_version(
        self, prompt_id: str, version_id: str, user_id: Optional[str] = None
    ) -> PromptVersion:
        prompt = await self.require_prompt(prompt_id)
        await self.ensure_can_view(prompt, user_id)
        return await self.require_version(prompt_id, version_id)

    async def append_version(
        self,
        prompt: Prompt,
        content: str,
        creator_id: str,
        auxiliary: Optional[VersionAuxiliary] = None,
        changelog: Optional[str] = None,
        action: str = "revise",
        carry_forward: bool = True,
        **log_context,
    ) -> PromptVersion:
        """Supersede, insert and repoint. The caller owns the transaction."""
        if not content:
            raise InvalidInputError("Prompt content must not be empty", field="content")

        expected_pointer = prompt.current_version_id
        latest = await self.store.latest_version(prompt.id)

        label = INITIAL_VERSION_LABEL if latest is None else next_version_label(latest.version)
        previous = latest.auxiliary if (latest is not None and carry_forward) else None

        superseded = await self.store.supersede_current(prompt.id)

        version = PromptVersion(
            prompt_id=prompt.id,
            version=label,
            content=content,
            changelog=changelog or settings.default_changelog,
            status=VersionState.CURRENT.value,
            creator_id=creator_id,
            created_at=next_created_at(latest),
        )
        version.set_auxiliary(merge_auxiliary(previous, auxiliary))
        await self.store.add_version(version)

        if not await self.store.swap_current_pointer(prompt.id, expected_pointer, version.id):
            logger.warning(
                "Current version pointer moved during write",
                prompt_id=prompt.id,
                expected_version_id=expected_pointer,
            )
            raise VersionConflictError(
                f"Prompt '{prompt.id}' was modified concurrently, reload and retry",
                prompt_id=prompt.id,
                expected_version_id=expected_pointer,
            )
        # The CAS is a bulk UPDATE; keep the loaded prompt in step with the row
        set_committed_value(prompt, "current_version_id", version.id)

        log_version_transition(
            logger,
            action=action,
            prompt_id=prompt.id,
            version_id=version.id,
            version=label,
            superseded_version_id=latest.id if latest is not None else None,
            superseded_count=superseded,
            **log_context,
        )
        return version

    async def require_prompt(self, prompt_id: str) -> Prompt:
        prompt = await self.store.get_prompt(prompt_id)
        if prompt is None:
            raise NotFoundError(
                f"Prompt '{prompt_id}' not found", resource="prompt", resource_id=prompt_id
            )
        return prompt

    async def require_version(self, prompt_id: str, version_id: str) -> PromptVersion:
        version = await self.store.get_prompt_version(prompt_id, version_id)
        if version is None:
            raise NotFoundError(
                f"Version '{version_id}' not found for prompt '{prompt_id}'",
                resource="version",
                resource_id=version_id,
            )
        return version

    async def ensure_can_view(self, prompt: Prompt, user_id: Optional[str]) -> None:
        """Public prompts are readable by anyone."""
        if user_id is None or prompt.visibility == PromptVisibility.PUBLIC.value:
            return
        await self.access_policy.ensure_can_view(user_id, prompt.workspace_id)
