"""Free-form text diff endpoint."""

from fastapi import APIRouter
import structlog

from ...core.config import settings
from ...core.exceptions import InvalidInputError
from ...models.diff import DiffResult, DiffTextRequest
from ...services.diff_engine import compute_diff, diff_table_cells

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/diff", tags=["🔀 Diff"])


@router.post("",
             response_model=DiffResult,
             summary="🔀 Diff Text",
             description="""
**Line-level diff of two texts.**

Each entry is `added`, `removed` or `unchanged` and carries 1-based line
numbers for the side(s) it appears on. Counts of added, removed and
unchanged lines are returned alongside.
             """,
             responses={
                 200: {
                     "description": "Diff computed",
                     "content": {
                         "application/json": {
                             "example": {
                                 "lines": [
                                     {"type": "unchanged", "content": "Hello", "line_number": {"old": 1, "new": 1}},
                                     {"type": "added", "content": "There", "line_number": {"old": None, "new": 2}},
                                     {"type": "unchanged", "content": "World", "line_number": {"old": 2, "new": 3}}
                                 ],
                                 "added": 1,
                                 "removed": 0,
                                 "unchanged": 2
                             }
                         }
                     }
                 },
                 422: {"description": "Input too large to diff"},
             })
async def diff_text(data: DiffTextRequest) -> DiffResult:
    cells = diff_table_cells(data.old_text, data.new_text)
    if cells > settings.diff_max_cells:
        raise InvalidInputError(
            f"Texts too large to diff ({cells} cells, limit {settings.diff_max_cells})",
            field="old_text,new_text",
        )
    return compute_diff(data.old_text, data.new_text)
