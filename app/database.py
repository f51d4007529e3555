"""Database connection management."""

import logging

import asyncpg
from asyncpg import Pool

from app.config import get_settings
from core.storage.repositories import ensure_tables

logger = logging.getLogger("aurora.database")


class Database:
    """Database connection manager using asyncpg."""

    def __init__(self) -> None:
        self._pool: Pool | None = None

    async def connect(self, database_url: str | None = None) -> None:
        """Create the connection pool and make sure the tables exist."""
        settings = get_settings()
        self._pool = await asyncpg.create_pool(
            database_url or settings.database_url,
            min_size=2,
            max_size=10,
        )
        print("✅ Database connection pool created")

        await ensure_tables(self._pool)
        logger.info("Database tables ready")

    async def disconnect(self) -> None:
        """Close database connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            print("✅ Database connection pool closed")

    @property
    def pool(self) -> Pool:
        """Get the connection pool."""
        if not self._pool:
            raise RuntimeError("Database not connected")
        return self._pool


# Global database instance
db = Database()
