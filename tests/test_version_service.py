"""
Tests for the version lifecycle: initial creation, revision and rollback
"""
import pytest
from sqlalchemy import func, select, update

from promptpub.core.exceptions import (
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
    VersionConflictError,
)
from promptpub.models.prompt import Prompt, PromptVersion
from promptpub.models.versions import VariableDefinition, VersionAuxiliary
from promptpub.services.access import StaticMembershipAccessPolicy, WorkspaceRole
from promptpub.services.version_service import VersionLifecycleManager, merge_auxiliary


async def current_versions(db, prompt_id):
    result = await db.execute(
        select(PromptVersion).where(
            PromptVersion.prompt_id == prompt_id,
            PromptVersion.status == "current",
        )
    )
    return list(result.scalars().all())


async def assert_single_current(db, prompt_id):
    """Exactly one current version, and the prompt points at it"""
    current = await current_versions(db, prompt_id)
    prompt = await db.get(Prompt, prompt_id)

    assert len(current) == 1
    assert prompt.current_version_id == current[0].id
    return current[0]


async def count_versions(db, prompt_id):
    result = await db.execute(
        select(func.count()).select_from(PromptVersion).where(PromptVersion.prompt_id == prompt_id)
    )
    return result.scalar_one()


async def bare_prompt(db, workspace_id="ws-1"):
    """A prompt row without any versions"""
    prompt = Prompt(workspace_id=workspace_id, title="Bare", creator_id="alice")
    db.add(prompt)
    await db.commit()
    return prompt.id


class TestCreateInitial:
    """Test create_initial"""

    async def test_creates_v1_0(self, db):
        prompt_id = await bare_prompt(db)
        manager = VersionLifecycleManager(db)

        version = await manager.create_initial(prompt_id, "Hello\nWorld", "alice")

        assert version.version == "v1.0"
        assert version.changelog == "initial version"
        assert version.status == "current"
        current = await assert_single_current(db, prompt_id)
        assert current.id == version.id

    async def test_rejects_prompt_with_versions(self, db, make_prompt):
        prompt_id, _ = await make_prompt()
        manager = VersionLifecycleManager(db)

        with pytest.raises(InvalidInputError):
            await manager.create_initial(prompt_id, "again", "alice")

        db.expire_all()
        assert await count_versions(db, prompt_id) == 1

    async def test_rejects_empty_content(self, db):
        prompt_id = await bare_prompt(db)
        manager = VersionLifecycleManager(db)

        with pytest.raises(InvalidInputError):
            await manager.create_initial(prompt_id, "", "alice")

        db.expire_all()
        assert await count_versions(db, prompt_id) == 0

    async def test_unknown_prompt(self, db):
        manager = VersionLifecycleManager(db)

        with pytest.raises(NotFoundError):
            await manager.create_initial("missing", "text", "alice")


class TestRevise:
    """Test revise"""

    async def test_new_version_supersedes_current(self, db, make_prompt):
        prompt_id, first_id = await make_prompt("Hello\nWorld")
        manager = VersionLifecycleManager(db)

        version = await manager.revise(prompt_id, "bob", content="Hello\nThere\nWorld")

        assert version.version == "v1.1"
        assert version.changelog == "content updated"
        first = await db.get(PromptVersion, first_id)
        assert first.status == "history"
        current = await assert_single_current(db, prompt_id)
        assert current.id == version.id

    async def test_custom_changelog(self, db, make_prompt):
        prompt_id, _ = await make_prompt()
        manager = VersionLifecycleManager(db)

        version = await manager.revise(prompt_id, "bob", content="new", changelog="tighter wording")

        assert version.changelog == "tighter wording"

    async def test_identical_content_still_creates_version(self, db, make_prompt):
        prompt_id, _ = await make_prompt("same")
        manager = VersionLifecycleManager(db)

        version = await manager.revise(prompt_id, "bob", content="same")

        assert version.version == "v1.1"
        assert await count_versions(db, prompt_id) == 2

    async def test_without_content_is_a_no_op(self, db, make_prompt):
        prompt_id, first_id = await make_prompt()
        manager = VersionLifecycleManager(db)

        assert await manager.revise(prompt_id, "bob") is None

        assert await count_versions(db, prompt_id) == 1
        current = await assert_single_current(db, prompt_id)
        assert current.id == first_id

    async def test_labels_increase_in_creation_order(self, db, make_prompt):
        prompt_id, _ = await make_prompt()
        manager = VersionLifecycleManager(db)

        for n in range(3):
            await manager.revise(prompt_id, "bob", content=f"edit {n}")

        listed = await manager.list_versions(prompt_id)
        assert [v.version for v in listed] == ["v1.3", "v1.2", "v1.1", "v1.0"]
        await assert_single_current(db, prompt_id)

    async def test_unparseable_latest_label_restarts_at_v1_1(self, db, make_prompt):
        prompt_id, first_id = await make_prompt()
        await db.execute(
            update(PromptVersion).where(PromptVersion.id == first_id).values(version="draft")
        )
        await db.commit()
        manager = VersionLifecycleManager(db)

        version = await manager.revise(prompt_id, "bob", content="next")

        assert version.version == "v1.1"

    async def test_auxiliary_fields_carry_forward(self, db, make_prompt):
        prompt_id, _ = await make_prompt(
            output_example="Hi Ann",
            target_models=["model-a"],
            variables=[{"name": "user", "description": "Who to greet"}],
        )
        manager = VersionLifecycleManager(db)

        version = await manager.revise(
            prompt_id,
            "bob",
            content="Hi {user}",
            auxiliary=VersionAuxiliary(target_models=["model-b"]),
        )

        assert version.target_models == ["model-b"]
        assert version.output_example == "Hi Ann"
        assert version.variables == [{"name": "user", "description": "Who to greet"}]

    async def test_explicit_none_clears_auxiliary_field(self, db, make_prompt):
        prompt_id, _ = await make_prompt(output_example="Hi Ann")
        manager = VersionLifecycleManager(db)

        version = await manager.revise(
            prompt_id, "bob", content="Hi", auxiliary=VersionAuxiliary(output_example=None)
        )

        assert version.output_example is None

    async def test_permission_denied_changes_nothing(self, db, make_prompt):
        prompt_id, first_id = await make_prompt()
        policy = StaticMembershipAccessPolicy({("ws-1", "viewer-user"): WorkspaceRole.VIEWER})
        manager = VersionLifecycleManager(db, policy)

        with pytest.raises(PermissionDeniedError):
            await manager.revise(prompt_id, "viewer-user", content="sneaky edit")

        db.expire_all()
        assert await count_versions(db, prompt_id) == 1
        current = await assert_single_current(db, prompt_id)
        assert current.id == first_id

    async def test_moved_pointer_raises_conflict(self, db, make_prompt):
        prompt_id, first_id = await make_prompt()
        stale = await db.get(Prompt, prompt_id)
        assert stale.current_version_id == first_id
        # Another writer repoints the prompt behind this session's back
        await db.execute(
            update(Prompt)
            .where(Prompt.id == prompt_id)
            .values(current_version_id="someone-else")
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        manager = VersionLifecycleManager(db)

        with pytest.raises(VersionConflictError):
            await manager.revise(prompt_id, "bob", content="lost update")

        db.expire_all()
        assert await count_versions(db, prompt_id) == 1
        first = await db.get(PromptVersion, first_id)
        assert first.status == "current"

    async def test_unknown_prompt(self, db):
        manager = VersionLifecycleManager(db)

        with pytest.raises(NotFoundError):
            await manager.revise("missing", "bob", content="text")


class TestRollback:
    """Test rollback"""

    async def test_rollback_copies_target(self, db, make_prompt):
        prompt_id, first_id = await make_prompt("Hello\nWorld", output_example="Hello!")
        manager = VersionLifecycleManager(db)
        await manager.revise(prompt_id, "bob", content="Hello\nThere\nWorld")
        await manager.revise(
            prompt_id,
            "bob",
            content="Goodbye\nWorld",
            auxiliary=VersionAuxiliary(output_example="Bye!"),
        )

        version = await manager.rollback(prompt_id, first_id, "carol")

        assert version.version == "v1.3"
        assert version.content == "Hello\nWorld"
        assert version.output_example == "Hello!"
        assert "v1.0" in version.changelog
        current = await assert_single_current(db, prompt_id)
        assert current.id == version.id

        target = await db.get(PromptVersion, first_id)
        assert target.content == "Hello\nWorld"
        assert target.version == "v1.0"
        assert target.status == "history"

    async def test_version_of_another_prompt_is_not_found(self, db, make_prompt):
        prompt_id, _ = await make_prompt()
        _, foreign_version_id = await make_prompt("Other", title="Other")
        manager = VersionLifecycleManager(db)

        with pytest.raises(NotFoundError):
            await manager.rollback(prompt_id, foreign_version_id, "carol")

        db.expire_all()
        assert await count_versions(db, prompt_id) == 1

    async def test_unknown_version(self, db, make_prompt):
        prompt_id, _ = await make_prompt()
        manager = VersionLifecycleManager(db)

        with pytest.raises(NotFoundError):
            await manager.rollback(prompt_id, "missing", "carol")


class TestQueries:
    """Test list_versions and get_version"""

    async def test_list_unknown_prompt(self, db):
        with pytest.raises(NotFoundError):
            await VersionLifecycleManager(db).list_versions("missing")

    async def test_get_version_scoped_to_prompt(self, db, make_prompt):
        prompt_id, version_id = await make_prompt()
        other_id, _ = await make_prompt("Other", title="Other")
        manager = VersionLifecycleManager(db)

        assert (await manager.get_version(prompt_id, version_id)).id == version_id
        with pytest.raises(NotFoundError):
            await manager.get_version(other_id, version_id)

    async def test_viewer_outside_workspace_is_denied(self, db, make_prompt):
        prompt_id, _ = await make_prompt()
        manager = VersionLifecycleManager(db, StaticMembershipAccessPolicy())

        with pytest.raises(PermissionDeniedError):
            await manager.list_versions(prompt_id, user_id="stranger")

    async def test_public_prompt_is_readable_by_anyone(self, db, make_prompt):
        prompt_id, _ = await make_prompt(visibility="public")
        manager = VersionLifecycleManager(db, StaticMembershipAccessPolicy())

        listed = await manager.list_versions(prompt_id, user_id="stranger")

        assert len(listed) == 1


class TestMergeAuxiliary:
    """Test merge_auxiliary"""

    def test_unset_fields_come_from_previous(self):
        previous = VersionAuxiliary(
            variables=[VariableDefinition(name="x")],
            output_example="out",
            target_models=["m"],
        )

        merged = merge_auxiliary(previous, VersionAuxiliary(output_example="new"))

        assert merged.output_example == "new"
        assert merged.target_models == ["m"]
        assert merged.variables[0].name == "x"

    def test_nothing_to_merge(self):
        merged = merge_auxiliary(None, None)

        assert merged.variables is None
        assert merged.output_example is None
        assert merged.target_models is None
