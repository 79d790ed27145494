"""
Tests for prompt-level operations
"""
import pytest
from sqlalchemy import func, select

from promptpub.core.exceptions import NotFoundError, PermissionDeniedError
from promptpub.models.prompt import Prompt, PromptVersion, UsageLog
from promptpub.models.prompts import PromptCreateRequest, PromptUpdateRequest, UsageSource
from promptpub.services.access import StaticMembershipAccessPolicy, WorkspaceRole
from promptpub.services.prompt_service import PromptService
from promptpub.services.version_service import VersionLifecycleManager


async def row_count(db, model, prompt_id):
    result = await db.execute(
        select(func.count()).select_from(model).where(model.prompt_id == prompt_id)
    )
    return result.scalar_one()


class TestCreatePrompt:
    """Test PromptService.create_prompt"""

    async def test_prompt_points_at_initial_version(self, db):
        prompt, version = await PromptService(db).create_prompt(
            PromptCreateRequest(workspace_id="ws-1", title="Greeting", content="Hi"),
            "alice",
        )

        assert version.version == "v1.0"
        assert version.changelog == "initial version"
        assert prompt.current_version_id == version.id
        assert prompt.status == "draft"

    async def test_requires_edit_role(self, db):
        policy = StaticMembershipAccessPolicy({("ws-1", "vic"): WorkspaceRole.VIEWER})

        with pytest.raises(PermissionDeniedError):
            await PromptService(db, policy).create_prompt(
                PromptCreateRequest(workspace_id="ws-1", title="Greeting", content="Hi"),
                "vic",
            )

        result = await db.execute(select(func.count()).select_from(Prompt))
        assert result.scalar_one() == 0


class TestHeldPromptObject:
    """Test that a prompt object kept in the session follows its pointer"""

    async def test_create_revise_rollback_on_one_session(self, db):
        service = PromptService(db)
        prompt, first = await service.create_prompt(
            PromptCreateRequest(workspace_id="ws-1", title="Greeting", content="Hello\nWorld"),
            "alice",
        )
        assert prompt.current_version_id == first.id

        same, second = await service.update_prompt(
            prompt.id, PromptUpdateRequest(content="Hello\nThere\nWorld"), "alice"
        )
        assert same is prompt
        assert second.version == "v1.1"
        assert prompt.current_version_id == second.id

        third = await VersionLifecycleManager(db).rollback(prompt.id, first.id, "alice")
        assert third.version == "v1.2"
        assert third.content == "Hello\nWorld"
        assert prompt.current_version_id == third.id

        result = await db.execute(select(Prompt.current_version_id).where(Prompt.id == prompt.id))
        stored = result.scalar_one()
        assert stored == third.id

    async def test_copy_then_revise_copy(self, db, make_prompt):
        prompt_id, _ = await make_prompt("Hello")
        service = PromptService(db)

        duplicate, _ = await service.copy_prompt(prompt_id, "bob")
        _, revised = await service.update_prompt(
            duplicate.id, PromptUpdateRequest(content="Hello copy"), "bob"
        )

        assert revised.version == "v1.1"
        assert duplicate.current_version_id == revised.id


class TestGetPrompt:
    """Test PromptService.get_prompt"""

    async def test_includes_current_version(self, db, make_prompt):
        prompt_id, version_id = await make_prompt("Hello")

        result = await PromptService(db).get_prompt(prompt_id, "alice")

        assert result.id == prompt_id
        assert result.current_version.id == version_id
        assert result.current_version.content == "Hello"

    async def test_unknown_prompt(self, db):
        with pytest.raises(NotFoundError):
            await PromptService(db).get_prompt("missing", "alice")


class TestUpdatePrompt:
    """Test PromptService.update_prompt"""

    async def test_content_creates_version(self, db, make_prompt):
        prompt_id, _ = await make_prompt("Hello")

        prompt, version = await PromptService(db).update_prompt(
            prompt_id, PromptUpdateRequest(content="Hello again", title="Renamed"), "alice"
        )

        assert version.version == "v1.1"
        assert prompt.current_version_id == version.id
        assert prompt.title == "Renamed"

    async def test_metadata_only_keeps_versions(self, db, make_prompt):
        prompt_id, first_id = await make_prompt("Hello")

        prompt, version = await PromptService(db).update_prompt(
            prompt_id, PromptUpdateRequest(status="published", description="Friendly"), "alice"
        )

        assert version is None
        assert prompt.status == "published"
        assert prompt.description == "Friendly"
        assert prompt.current_version_id == first_id
        assert await row_count(db, PromptVersion, prompt_id) == 1


class TestDeletePrompt:
    """Test PromptService.delete_prompt"""

    async def test_removes_versions_and_usage(self, db, make_prompt):
        prompt_id, _ = await make_prompt()
        service = PromptService(db)
        await service.update_prompt(prompt_id, PromptUpdateRequest(content="v2"), "alice")
        await service.record_usage(prompt_id, "alice")

        await service.delete_prompt(prompt_id, "alice")

        assert await db.get(Prompt, prompt_id) is None
        assert await row_count(db, PromptVersion, prompt_id) == 0
        assert await row_count(db, UsageLog, prompt_id) == 0

    async def test_unknown_prompt(self, db):
        with pytest.raises(NotFoundError):
            await PromptService(db).delete_prompt("missing", "alice")


class TestCopyPrompt:
    """Test PromptService.copy_prompt"""

    async def test_copy_starts_fresh_history(self, db, make_prompt):
        prompt_id, _ = await make_prompt("Hello", target_models=["model-a"])
        service = PromptService(db)
        await service.update_prompt(prompt_id, PromptUpdateRequest(content="Hello v2"), "alice")

        duplicate, version = await service.copy_prompt(prompt_id, "bob", workspace_id="ws-2")

        assert duplicate.id != prompt_id
        assert duplicate.title == "Greeting (copy)"
        assert duplicate.workspace_id == "ws-2"
        assert duplicate.status == "draft"
        assert duplicate.creator_id == "bob"
        assert version.version == "v1.0"
        assert version.content == "Hello v2"
        assert version.target_models == ["model-a"]
        assert version.changelog == "copied from another prompt"
        assert duplicate.current_version_id == version.id

    async def test_copy_into_foreign_workspace_denied(self, db, make_prompt):
        prompt_id, _ = await make_prompt()
        policy = StaticMembershipAccessPolicy({("ws-1", "bob"): WorkspaceRole.OWNER})

        with pytest.raises(PermissionDeniedError):
            await PromptService(db, policy).copy_prompt(prompt_id, "bob", workspace_id="ws-2")

        result = await db.execute(select(func.count()).select_from(Prompt))
        assert result.scalar_one() == 1


class TestRecordUsage:
    """Test PromptService.record_usage"""

    async def test_counts_and_logs_current_version(self, db, make_prompt):
        prompt_id, version_id = await make_prompt()
        service = PromptService(db)

        await service.record_usage(prompt_id, "alice")
        prompt = await service.record_usage(prompt_id, "bob", UsageSource.API)

        assert prompt.usage_count == 2
        assert prompt.last_used_at is not None
        logs = (await db.execute(select(UsageLog).where(UsageLog.prompt_id == prompt_id))).scalars().all()
        assert {log.source for log in logs} == {"web", "api"}
        assert {log.version_id for log in logs} == {version_id}
