"""Storage of prompt versions and the current-version pointer."""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncContextManager, List, Optional, Protocol

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.prompt import Prompt, PromptVersion, UsageLog, utcnow
from ..models.versions import VersionState

logger = structlog.get_logger(__name__)


class VersionStore(Protocol):
    """Interface the version engine needs from persistence."""

    def transaction(self) -> AsyncContextManager[None]:
        """Async context manager committing on success, rolling back on error."""
        ...

    async def get_prompt(self, prompt_id: str) -> Optional[Prompt]:
        ...

    async def get_version(self, version_id: str) -> Optional[PromptVersion]:
        ...

    async def get_prompt_version(self, prompt_id: str, version_id: str) -> Optional[PromptVersion]:
        ...

    async def latest_version(self, prompt_id: str) -> Optional[PromptVersion]:
        ...

    async def list_versions(self, prompt_id: str) -> List[PromptVersion]:
        ...

    async def count_versions(self, prompt_id: str) -> int:
        ...

    async def add_prompt(self, prompt: Prompt) -> Prompt:
        ...

    async def add_version(self, version: PromptVersion) -> PromptVersion:
        ...

    async def supersede_current(self, prompt_id: str) -> int:
        ...

    async def swap_current_pointer(
        self, prompt_id: str, expected_version_id: Optional[str], new_version_id: str
    ) -> bool:
        ...

    async def delete_prompt(self, prompt_id: str) -> None:
        ...

    async def add_usage(self, usage: UsageLog) -> UsageLog:
        ...


class SQLAlchemyVersionStore:
    """``VersionStore`` backed by an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def transaction(self):
        """Treat everything inside the block as one unit of work."""
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def get_prompt(self, prompt_id: str) -> Optional[Prompt]:
        return await self.db.get(Prompt, prompt_id)

    async def get_version(self, version_id: str) -> Optional[PromptVersion]:
        return await self.db.get(PromptVersion, version_id)

    async def get_prompt_version(self, prompt_id: str, version_id: str) -> Optional[PromptVersion]:
        result = await self.db.execute(
            select(PromptVersion).where(
                PromptVersion.id == version_id,
                PromptVersion.prompt_id == prompt_id,
            )
        )
        return result.scalar_one_or_none()

    async def latest_version(self, prompt_id: str) -> Optional[PromptVersion]:
        result = await self.db.execute(
            select(PromptVersion)
            .where(PromptVersion.prompt_id == prompt_id)
            .order_by(PromptVersion.created_at.desc(), PromptVersion.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_versions(self, prompt_id: str) -> List[PromptVersion]:
        """All versions of a prompt, newest first."""
        result = await self.db.execute(
            select(PromptVersion)
            .where(PromptVersion.prompt_id == prompt_id)
            .order_by(PromptVersion.created_at.desc(), PromptVersion.id.desc())
        )
        return list(result.scalars().all())

    async def count_versions(self, prompt_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(PromptVersion).where(PromptVersion.prompt_id == prompt_id)
        )
        return result.scalar_one()

    async def add_prompt(self, prompt: Prompt) -> Prompt:
        self.db.add(prompt)
        await self.db.flush()
        return prompt

    async def add_version(self, version: PromptVersion) -> PromptVersion:
        self.db.add(version)
        await self.db.flush()
        return version

    async def supersede_current(self, prompt_id: str) -> int:
        """Move every ``current`` version of the prompt to ``history``."""
        result = await self.db.execute(
            update(PromptVersion)
            .where(
                PromptVersion.prompt_id == prompt_id,
                PromptVersion.status == VersionState.CURRENT.value,
            )
            .values(status=VersionState.HISTORY.value)
        )
        return result.rowcount

    async def swap_current_pointer(
        self, prompt_id: str, expected_version_id: Optional[str], new_version_id: str
    ) -> bool:
        """Compare-and-swap the prompt's current-version pointer.

        Returns ``False`` when the pointer no longer holds ``expected_version_id``.
        """
        if expected_version_id is None:
            pointer_matches = Prompt.current_version_id.is_(None)
        else:
            pointer_matches = Prompt.current_version_id == expected_version_id

        result = await self.db.execute(
            update(Prompt)
            .where(Prompt.id == prompt_id, pointer_matches)
            .values(current_version_id=new_version_id, updated_at=utcnow())
        )
        return result.rowcount == 1

    async def delete_prompt(self, prompt_id: str) -> None:
        """Delete a prompt together with its versions and usage logs."""
        await self.db.execute(delete(UsageLog).where(UsageLog.prompt_id == prompt_id))
        await self.db.execute(delete(PromptVersion).where(PromptVersion.prompt_id == prompt_id))
        await self.db.execute(delete(Prompt).where(Prompt.id == prompt_id))
        logger.debug("Prompt rows deleted", prompt_id=prompt_id)

    async def add_usage(self, usage: UsageLog) -> UsageLog:
        self.db.add(usage)
        await self.db.flush()
        return usage


def next_created_at(latest: Optional[PromptVersion]) -> datetime:
    """Timestamp for a new version, strictly after the prompt's latest one."""
    now = utcnow()
    if latest is not None and latest.created_at is not None and now <= latest.created_at:
        return latest.created_at + timedelta(microseconds=1)
    return now
