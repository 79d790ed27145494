"""Database configuration and connection management."""

from typing import Optional
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from .config import settings
from .exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite only honours ON DELETE CASCADE with this pragma set per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Database connection manager."""

    def __init__(self):
        self.engine: Optional[AsyncEngine] = None
        self.session_maker: Optional[async_sessionmaker] = None
        self.database_url: str = settings.database_url
        self._is_connected = False

    async def initialize(self, database_url: Optional[str] = None) -> bool:
        """Initialize database connection."""
        if database_url:
            self.database_url = database_url

        try:
            engine_options = {"echo": settings.database_echo, "pool_pre_ping": True}
            if not self._is_sqlite():
                engine_options["pool_recycle"] = 3600

            self.engine = create_async_engine(self.database_url, **engine_options)

            if self._is_sqlite():
                event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

            self.session_maker = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )

            await self._test_connection()

            logger.info(
                "✅ Database initialized successfully",
                database_type=self._get_db_type(),
                echo_enabled=settings.database_echo
            )

            self._is_connected = True
            return True

        except Exception as e:
            logger.error(
                "❌ Database initialization failed",
                error=str(e),
                database_url=self._mask_db_url()
            )
            self._is_connected = False
            return False

    async def _test_connection(self):
        """Test database connection."""
        if not self.engine:
            raise RuntimeError("Database engine not initialized")

        async with self.engine.begin() as conn:
            result = await conn.execute(text("SELECT 1"))
            result.fetchone()

        logger.debug("Database connection test successful")

    def _is_sqlite(self) -> bool:
        return self._get_db_type() == "sqlite"

    def _get_db_type(self) -> str:
        """Get database type from URL."""
        if "postgresql" in self.database_url:
            return "postgresql"
        elif "sqlite" in self.database_url:
            return "sqlite"
        elif "mysql" in self.database_url:
            return "mysql"
        else:
            return "unknown"

    def _mask_db_url(self) -> str:
        """Mask sensitive info in database URL."""
        if '@' in self.database_url:
            return self.database_url.split('@')[0] + '@***'
        return self.database_url

    @asynccontextmanager
    async def get_session(self):
        """Get database session context manager."""
        if not self.session_maker:
            raise DatabaseError("Database not initialized", operation="session")

        async with self.session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def close(self):
        """Close database connections."""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database connections closed")
            self._is_connected = False

    @property
    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self._is_connected


# Global database manager instance
db_manager = DatabaseManager()


async def get_database_session():
    """Dependency to get database session."""
    if not db_manager.is_connected:
        raise DatabaseError("Database not connected", operation="session")

    async with db_manager.get_session() as session:
        yield session


async def init_database(database_url: Optional[str] = None) -> bool:
    """Initialize database connection and create tables."""
    from .database_setup import create_all_tables

    success = await db_manager.initialize(database_url)
    if success:
        try:
            await create_all_tables(db_manager.engine)
            logger.info("Database setup completed successfully")
        except Exception as e:
            logger.error(
                "Table creation failed",
                error=str(e)
            )
            raise
    return success


async def close_database():
    """Close database connections."""
    await db_manager.close()


async def check_database_health() -> dict:
    """Check database health status."""
    if not db_manager.is_connected:
        return {
            "status": "disconnected",
            "database_type": db_manager._get_db_type(),
            "error": "Database not connected"
        }

    try:
        async with db_manager.get_session() as session:
            await session.execute(text("SELECT 1"))

        return {
            "status": "healthy",
            "database_type": db_manager._get_db_type(),
            "echo_enabled": settings.database_echo
        }

    except Exception as e:
        return {
            "status": "error",
            "database_type": db_manager._get_db_type(),
            "error": str(e)
        }
