"""FastAPI dependencies shared by the routers."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import get_database_session
from ..core.exceptions import AuthenticationError
from ..services.access import AccessPolicy, AllowAllAccessPolicy
from ..services.comparison import ComparisonSelector
from ..services.prompt_service import PromptService
from ..services.version_service import VersionLifecycleManager


async def get_current_user_id(request: Request) -> str:
    """Caller identity, set by the authenticating proxy in front of the service."""
    user_id = request.headers.get(settings.user_id_header)
    if not user_id:
        raise AuthenticationError(
            f"Missing {settings.user_id_header} header", auth_type="header"
        )
    return user_id


def get_access_policy(request: Request) -> AccessPolicy:
    """Policy installed on ``app.state.access_policy``, allow-all otherwise."""
    return getattr(request.app.state, "access_policy", None) or AllowAllAccessPolicy()


async def get_prompt_service(
    db: AsyncSession = Depends(get_database_session),
    access_policy: AccessPolicy = Depends(get_access_policy),
) -> PromptService:
    """Get prompt service dependency."""
    return PromptService(db, access_policy)


async def get_version_manager(
    db: AsyncSession = Depends(get_database_session),
    access_policy: AccessPolicy = Depends(get_access_policy),
) -> VersionLifecycleManager:
    """Get version lifecycle dependency."""
    return VersionLifecycleManager(db, access_policy)


async def get_comparison_selector(
    db: AsyncSession = Depends(get_database_session),
) -> ComparisonSelector:
    """Get comparison dependency bounded by the configured diff size."""
    return ComparisonSelector(db, max_cells=settings.diff_max_cells)
