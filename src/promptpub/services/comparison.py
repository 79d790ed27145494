"""Chronological comparison of two prompt versions."""

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import InvalidInputError, NotFoundError
from ..models.diff import VersionComparison
from ..models.prompt import PromptVersion
from .diff_engine import compute_diff, diff_table_cells
from .version_store import SQLAlchemyVersionStore, VersionStore

logger = structlog.get_logger(__name__)


class ComparisonSelector:
    """Resolves two versions, orders them oldest first and diffs them."""

    def __init__(
        self,
        db: AsyncSession,
        store: Optional[VersionStore] = None,
        max_cells: Optional[int] = None,
    ):
        self.store = store or SQLAlchemyVersionStore(db)
        self.max_cells = max_cells

    async def compare(
        self,
        version_id_a: str,
        version_id_b: str,
        prompt_id: Optional[str] = None,
    ) -> VersionComparison:
        """Diff two versions regardless of the order they were selected in.

        Raises:
            NotFoundError: when either version is missing, belongs to a prompt
                other than ``prompt_id``, or the two belong to different prompts
            InvalidInputError: when the diff would exceed ``max_cells``
        """
        first = await self._resolve(version_id_a, prompt_id)
        second = await self._resolve(version_id_b, prompt_id or first.prompt_id)

        old, new = sorted((first, second), key=lambda v: (v.created_at, v.id))

        if self.max_cells is not None:
            cells = diff_table_cells(old.content, new.content)
            if cells > self.max_cells:
                raise InvalidInputError(
                    f"Versions too large to compare ({cells} cells, limit {self.max_cells})",
                    field="content",
                )

        diff = compute_diff(old.content, new.content)

        logger.debug(
            "Versions compared",
            prompt_id=old.prompt_id,
            old_version=old.version,
            new_version=new.version,
            added=diff.added,
            removed=diff.removed,
        )

        return VersionComparison(
            prompt_id=old.prompt_id,
            old_version_id=old.id,
            old_version=old.version,
            new_version_id=new.id,
            new_version=new.version,
            diff=diff,
        )

    async def _resolve(self, version_id: str, prompt_id: Optional[str]) -> PromptVersion:
        version = await self.store.get_version(version_id)
        if version is None or (prompt_id is not None and version.prompt_id != prompt_id):
            raise NotFoundError(
                f"Version '{version_id}' not found",
                resource="version",
                resource_id=version_id,
            )
        return version
