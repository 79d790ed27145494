"""Prompt and prompt version endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
import structlog

from ...models.diff import VersionComparison
from ...models.prompts import (
    InitialVersionRequest,
    PromptCopyRequest,
    PromptCreated,
    PromptCreateRequest,
    PromptRead,
    PromptUpdated,
    PromptUpdateRequest,
    UsageRecorded,
    UsageRecordRequest,
    UsageSource,
)
from ...models.versions import VersionCreated, VersionHistory, VersionRead
from ...services.comparison import ComparisonSelector
from ...services.prompt_service import PromptService
from ...services.version_service import VersionLifecycleManager
from ..dependencies import (
    get_comparison_selector,
    get_current_user_id,
    get_prompt_service,
    get_version_manager,
)

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/prompts", tags=["📝 Prompts"])


@router.post("",
             response_model=PromptCreated,
             status_code=status.HTTP_201_CREATED,
             summary="➕ Create Prompt",
             description="""
**Create a prompt together with its first version.**

The first version is always labelled `v1.0`, is `current`, and carries the
changelog `initial version`.
             """)
async def create_prompt(
    data: PromptCreateRequest,
    user_id: str = Depends(get_current_user_id),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> PromptCreated:
    prompt, version = await prompt_service.create_prompt(data, user_id)
    return PromptCreated(id=prompt.id, version_id=version.id, version=version.version)


@router.get("/{prompt_id}",
            response_model=PromptRead,
            summary="🔍 Get Prompt",
            description="Get a prompt and its current version.")
async def get_prompt(
    prompt_id: str = Path(..., description="Prompt ID"),
    user_id: str = Depends(get_current_user_id),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> PromptRead:
    return await prompt_service.get_prompt(prompt_id, user_id)


@router.put("/{prompt_id}",
            response_model=PromptUpdated,
            summary="✏️ Update Prompt",
            description="""
**Update a prompt.**

- Sending `content` always creates a new version, even when the text is
  unchanged. The previous version moves to `history`.
- Auxiliary fields (`variables`, `output_example`, `target_models`) that are
  not sent are carried forward from the previous version.
- Title, description, status and visibility update the prompt in place.
            """,
            responses={
                200: {
                    "description": "Prompt updated",
                    "content": {
                        "application/json": {
                            "example": {
                                "id": "3f2a9c1e8b7d4e6f9a0b1c2d3e4f5a6b",
                                "version_id": "9b8a7c6d5e4f3a2b1c0d9e8f7a6b5c4d",
                                "version": "v1.1",
                                "new_version_created": True
                            }
                        }
                    }
                },
                404: {"description": "Prompt not found"},
                409: {"description": "Prompt was modified concurrently"},
            })
async def update_prompt(
    data: PromptUpdateRequest,
    prompt_id: str = Path(..., description="Prompt ID"),
    user_id: str = Depends(get_current_user_id),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> PromptUpdated:
    prompt, version = await prompt_service.update_prompt(prompt_id, data, user_id)
    if version is None:
        return PromptUpdated(id=prompt.id, version_id=prompt.current_version_id)
    return PromptUpdated(
        id=prompt.id,
        version_id=version.id,
        version=version.version,
        new_version_created=True,
    )


@router.delete("/{prompt_id}",
               summary="🗑️ Delete Prompt",
               description="Delete a prompt and every one of its versions.")
async def delete_prompt(
    prompt_id: str = Path(..., description="Prompt ID"),
    user_id: str = Depends(get_current_user_id),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> dict:
    await prompt_service.delete_prompt(prompt_id, user_id)
    return {"message": "Prompt deleted", "id": prompt_id}


@router.post("/{prompt_id}/copy",
             response_model=PromptCreated,
             status_code=status.HTTP_201_CREATED,
             summary="📋 Copy Prompt",
             description="Copy the current version into a new draft prompt with its own history.")
async def copy_prompt(
    prompt_id: str = Path(..., description="Prompt ID"),
    data: Optional[PromptCopyRequest] = None,
    user_id: str = Depends(get_current_user_id),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> PromptCreated:
    prompt, version = await prompt_service.copy_prompt(
        prompt_id, user_id, data.workspace_id if data else None
    )
    return PromptCreated(
        id=prompt.id,
        version_id=version.id if version else None,
        version=version.version if version else None,
    )


@router.post("/{prompt_id}/use",
             response_model=UsageRecorded,
             summary="📈 Record Usage",
             description="Record that the prompt's current version was used.")
async def record_usage(
    prompt_id: str = Path(..., description="Prompt ID"),
    data: Optional[UsageRecordRequest] = None,
    user_id: str = Depends(get_current_user_id),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> UsageRecorded:
    prompt = await prompt_service.record_usage(
        prompt_id, user_id, data.source if data else UsageSource.WEB
    )
    return UsageRecorded(
        prompt_id=prompt.id,
        version_id=prompt.current_version_id,
        usage_count=prompt.usage_count,
    )


@router.get("/{prompt_id}/versions",
            response_model=VersionHistory,
            summary="🕓 List Versions",
            description="List all versions of a prompt, newest first.")
async def list_versions(
    prompt_id: str = Path(..., description="Prompt ID"),
    user_id: str = Depends(get_current_user_id),
    versions: VersionLifecycleManager = Depends(get_version_manager),
) -> VersionHistory:
    prompt, items = await versions.version_history(prompt_id, user_id)
    return VersionHistory(
        prompt_id=prompt_id,
        current_version_id=prompt.current_version_id,
        total=len(items),
        versions=[VersionRead.model_validate(item) for item in items],
    )


@router.post("/{prompt_id}/versions",
             response_model=VersionCreated,
             status_code=status.HTTP_201_CREATED,
             summary="🌱 Create Initial Version",
             description="Create `v1.0` for a prompt that has no versions yet.")
async def create_initial_version(
    data: InitialVersionRequest,
    prompt_id: str = Path(..., description="Prompt ID"),
    user_id: str = Depends(get_current_user_id),
    versions: VersionLifecycleManager = Depends(get_version_manager),
) -> VersionCreated:
    version = await versions.create_initial(prompt_id, data.content, user_id, data.auxiliary())
    return VersionCreated(
        prompt_id=prompt_id,
        version_id=version.id,
        version=version.version,
        changelog=version.changelog,
    )


@router.get("/{prompt_id}/versions/compare",
            response_model=VersionComparison,
            summary="🔀 Compare Versions",
            description="""
**Line diff between two versions of a prompt.**

The two versions may be given in any order; the older one (by creation time)
is always treated as the old side.
            """)
async def compare_versions(
    prompt_id: str = Path(..., description="Prompt ID"),
    a: str = Query(..., description="First version ID"),
    b: str = Query(..., description="Second version ID"),
    user_id: str = Depends(get_current_user_id),
    versions: VersionLifecycleManager = Depends(get_version_manager),
    comparison: ComparisonSelector = Depends(get_comparison_selector),
) -> VersionComparison:
    prompt = await versions.require_prompt(prompt_id)
    await versions.ensure_can_view(prompt, user_id)
    return await comparison.compare(a, b, prompt_id=prompt_id)


@router.get("/{prompt_id}/versions/{version_id}",
            response_model=VersionRead,
            summary="📄 Get Version",
            description="Get a single version of a prompt.")
async def get_version(
    prompt_id: str = Path(..., description="Prompt ID"),
    version_id: str = Path(..., description="Version ID"),
    user_id: str = Depends(get_current_user_id),
    versions: VersionLifecycleManager = Depends(get_version_manager),
) -> VersionRead:
    version = await versions.get_version(prompt_id, version_id, user_id)
    return VersionRead.model_validate(version)


@router.post("/{prompt_id}/rollback/{version_id}",
             response_model=VersionCreated,
             summary="⏪ Roll Back",
             description="""
**Roll a prompt back to an earlier version.**

A new current version is created with the target's content and auxiliary
fields and the changelog `rolled back to <label>`. The target version itself
is not modified.
             """)
async def rollback_version(
    prompt_id: str = Path(..., description="Prompt ID"),
    version_id: str = Path(..., description="Version to roll back to"),
    user_id: str = Depends(get_current_user_id),
    versions: VersionLifecycleManager = Depends(get_version_manager),
) -> VersionCreated:
    version = await versions.rollback(prompt_id, version_id, user_id)
    return VersionCreated(
        prompt_id=prompt_id,
        version_id=version.id,
        version=version.version,
        changelog=version.changelog,
    )
