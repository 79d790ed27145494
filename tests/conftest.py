"""
Shared fixtures: a throwaway SQLite database per test and an API client bound to it.
"""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from promptpub.core.database import _enable_sqlite_foreign_keys, get_database_session
from promptpub.core.database_setup import create_all_tables
from promptpub.main import create_app
from promptpub.models.prompts import PromptCreateRequest
from promptpub.services.prompt_service import PromptService


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Async engine on a fresh SQLite file with all tables created"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'promptpub.db'}")
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    await create_all_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_prompt(db):
    """Create a prompt with its v1.0 through the prompt service"""

    async def _make(content="Hello\nWorld", workspace_id="ws-1", creator_id="alice", **fields):
        service = PromptService(db)
        prompt, version = await service.create_prompt(
            PromptCreateRequest(
                workspace_id=workspace_id,
                title=fields.pop("title", "Greeting"),
                content=content,
                **fields,
            ),
            creator_id,
        )
        return prompt.id, version.id

    return _make


@pytest.fixture
def build_client(session_maker):
    """Factory for API clients; pass an access policy to enforce workspace roles"""

    def _build(access_policy=None):
        app = create_app(access_policy=access_policy)

        async def override_session():
            async with session_maker() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        app.dependency_overrides[get_database_session] = override_session
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _build


@pytest_asyncio.fixture
async def client(build_client):
    async with build_client() as api:
        yield api
