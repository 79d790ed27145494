"""
Tests for comparing two versions of a prompt
"""
import pytest

from promptpub.core.exceptions import InvalidInputError, NotFoundError
from promptpub.services.comparison import ComparisonSelector
from promptpub.services.version_service import VersionLifecycleManager


class TestCompare:
    """Test ComparisonSelector.compare"""

    async def test_order_of_selection_does_not_matter(self, db, make_prompt):
        prompt_id, first_id = await make_prompt("Hello\nWorld")
        second = await VersionLifecycleManager(db).revise(
            prompt_id, "bob", content="Hello\nThere\nWorld"
        )
        selector = ComparisonSelector(db)

        forward = await selector.compare(first_id, second.id)
        backward = await selector.compare(second.id, first_id)

        for comparison in (forward, backward):
            assert comparison.prompt_id == prompt_id
            assert comparison.old_version == "v1.0"
            assert comparison.new_version == "v1.1"
            assert comparison.old_version_id == first_id
            assert comparison.diff.added == 1
            assert comparison.diff.removed == 0
            assert [line.content for line in comparison.diff.lines] == ["Hello", "There", "World"]

    async def test_same_version_compares_clean(self, db, make_prompt):
        prompt_id, first_id = await make_prompt("a\nb")

        comparison = await ComparisonSelector(db).compare(first_id, first_id, prompt_id=prompt_id)

        assert comparison.diff.added == 0
        assert comparison.diff.removed == 0
        assert comparison.diff.unchanged == 2

    async def test_missing_version(self, db, make_prompt):
        _, first_id = await make_prompt()

        with pytest.raises(NotFoundError):
            await ComparisonSelector(db).compare(first_id, "missing")

    async def test_versions_of_different_prompts(self, db, make_prompt):
        _, first_id = await make_prompt()
        _, other_id = await make_prompt("Other", title="Other")

        with pytest.raises(NotFoundError):
            await ComparisonSelector(db).compare(first_id, other_id)

    async def test_version_outside_stated_prompt(self, db, make_prompt):
        prompt_id, _ = await make_prompt()
        _, other_id = await make_prompt("Other", title="Other")

        with pytest.raises(NotFoundError):
            await ComparisonSelector(db).compare(other_id, other_id, prompt_id=prompt_id)

    async def test_size_guard(self, db, make_prompt):
        prompt_id, first_id = await make_prompt("a\nb\nc")
        second = await VersionLifecycleManager(db).revise(prompt_id, "bob", content="a\nb\nc\nd")

        with pytest.raises(InvalidInputError):
            await ComparisonSelector(db, max_cells=10).compare(first_id, second.id)
