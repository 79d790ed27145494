"""Prompt-level operations built on the version lifecycle."""

from typing import Optional, Tuple

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.prompt import Prompt, PromptVersion, UsageLog, utcnow
from ..models.prompts import (
    PromptCreateRequest,
    PromptRead,
    PromptStatus,
    PromptUpdateRequest,
    PromptVisibility,
    UsageSource,
)
from ..models.versions import VersionRead
from .access import AccessPolicy, AllowAllAccessPolicy
from .version_service import INITIAL_CHANGELOG, VersionLifecycleManager
from .version_store import SQLAlchemyVersionStore

logger = structlog.get_logger(__name__)

COPY_CHANGELOG = "copied from another prompt"
COPY_TITLE_SUFFIX = " (copy)"


class PromptService:
    """Create, edit, copy, delete and track usage of prompts."""

    def __init__(self, db: AsyncSession, access_policy: Optional[AccessPolicy] = None):
        self.store = SQLAlchemyVersionStore(db)
        self.access_policy = access_policy or AllowAllAccessPolicy()
        self.versions = VersionLifecycleManager(db, self.access_policy, store=self.store)

    async def create_prompt(self, data: PromptCreateRequest, creator_id: str) -> Tuple[Prompt, PromptVersion]:
        """Create a prompt and its ``v1.0`` in one transaction."""
        await self.access_policy.ensure_can_edit(creator_id, data.workspace_id)

        async with self.store.transaction():
            prompt = await self.store.add_prompt(
                Prompt(
                    workspace_id=data.workspace_id,
                    title=data.title,
                    description=data.description,
                    status=data.status.value,
                    visibility=data.visibility.value,
                    creator_id=creator_id,
                )
            )
            version = await self.versions.append_version(
                prompt,
                content=data.content,
                auxiliary=data.auxiliary(),
                changelog=INITIAL_CHANGELOG,
                creator_id=creator_id,
                action="create",
            )

        logger.info("Prompt created", prompt_id=prompt.id, workspace_id=prompt.workspace_id)
        return prompt, version

    async def get_prompt(self, prompt_id: str, user_id: Optional[str] = None) -> PromptRead:
        """Prompt details including its current version."""
        prompt = await self.versions.require_prompt(prompt_id)
        await self.versions.ensure_can_view(prompt, user_id)

        result = PromptRead.model_validate(prompt)
        current = await self._current_version(prompt)
        if current is not None:
            result.current_version = VersionRead.model_validate(current)
        return result

    async def update_prompt(
        self, prompt_id: str, data: PromptUpdateRequest, user_id: str
    ) -> Tuple[Prompt, Optional[PromptVersion]]:
        """Update prompt fields; new content also creates a version.

        Both changes commit together or not at all.
        """
        async with self.store.transaction():
            prompt = await self.versions.require_prompt(prompt_id)
            await self.access_policy.ensure_can_edit(user_id, prompt.workspace_id)

            new_version = None
            if data.content is not None:
                new_version = await self.versions.append_version(
                    prompt,
                    content=data.content,
                    auxiliary=data.auxiliary(),
                    changelog=data.changelog,
                    creator_id=user_id,
                    action="revise",
                )

            fields = data.model_fields_set
            if data.title:
                prompt.title = data.title
            if "description" in fields:
                prompt.description = data.description
            if data.status is not None:
                prompt.status = data.status.value
            if data.visibility is not None:
                prompt.visibility = data.visibility.value
            prompt.updated_at = utcnow()
            await self.store.db.flush()

        logger.info(
            "Prompt updated",
            prompt_id=prompt_id,
            new_version_id=new_version.id if new_version else None,
        )
        return prompt, new_version

    async def delete_prompt(self, prompt_id: str, user_id: str) -> None:
        """Delete a prompt with all its versions."""
        async with self.store.transaction():
            prompt = await self.versions.require_prompt(prompt_id)
            await self.access_policy.ensure_can_edit(user_id, prompt.workspace_id)
            await self.store.delete_prompt(prompt_id)

        logger.info("Prompt deleted", prompt_id=prompt_id)

    async def copy_prompt(
        self, prompt_id: str, user_id: str, workspace_id: Optional[str] = None
    ) -> Tuple[Prompt, Optional[PromptVersion]]:
        """Copy a prompt's current version into a new draft prompt.

        The copy starts its own history at ``v1.0``.
        """
        async with self.store.transaction():
            source = await self.versions.require_prompt(prompt_id)
            await self.versions.ensure_can_view(source, user_id)

            target_workspace = workspace_id or source.workspace_id
            await self.access_policy.ensure_can_edit(user_id, target_workspace)

            current = await self._current_version(source)
            duplicate = await self.store.add_prompt(
                Prompt(
                    workspace_id=target_workspace,
                    title=f"{source.title}{COPY_TITLE_SUFFIX}",
                    description=source.description,
                    status=PromptStatus.DRAFT.value,
                    visibility=PromptVisibility.WORKSPACE.value,
                    creator_id=user_id,
                )
            )

            version = None
            if current is not None:
                version = await self.versions.append_version(
                    duplicate,
                    content=current.content,
                    auxiliary=current.auxiliary,
                    changelog=COPY_CHANGELOG,
                    creator_id=user_id,
                    action="copy",
                    copied_from=source.id,
                )

        logger.info("Prompt copied", source_prompt_id=prompt_id, prompt_id=duplicate.id)
        return duplicate, version

    async def record_usage(
        self, prompt_id: str, user_id: Optional[str], source: UsageSource = UsageSource.WEB
    ) -> Prompt:
        """Log a use of the prompt's current version and bump its counter."""
        async with self.store.transaction():
            prompt = await self.versions.require_prompt(prompt_id)
            await self.versions.ensure_can_view(prompt, user_id)

            await self.store.add_usage(
                UsageLog(
                    prompt_id=prompt.id,
                    version_id=prompt.current_version_id,
                    user_id=user_id,
                    source=UsageSource(source).value,
                )
            )
            prompt.usage_count = (prompt.usage_count or 0) + 1
            prompt.last_used_at = utcnow()
            await self.store.db.flush()

        return prompt

    async def _current_version(self, prompt: Prompt) -> Optional[PromptVersion]:
        """The version the prompt points at, falling back to its latest."""
        if prompt.current_version_id:
            current = await self.store.get_prompt_version(prompt.id, prompt.current_version_id)
            if current is not None:
                return current
        return await self.store.latest_version(prompt.id)
