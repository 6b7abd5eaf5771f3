"""
Base Repository
Generic repository pattern for database operations
"""

from abc import ABC
from typing import Any, Dict, List, Optional

import asyncpg

from utils.logger import get_logger


class BaseRepository(ABC):
    """
    Base repository class for database operations.

    This is an abstract base class - do not instantiate directly.
    Subclasses should provide table_name and primary_key.
    """

    def __init__(
        self,
        pool: asyncpg.Pool,
        table_name: str,
        primary_key: str = "id"
    ):
        """
        Create a new repository instance.

        Args:
            pool: PostgreSQL connection pool
            table_name: Database table name
            primary_key: Primary key column name
        """
        if self.__class__ == BaseRepository:
            raise TypeError("Cannot instantiate abstract BaseRepository directly")

        self.pool = pool
        self.table_name = table_name
        self.primary_key = primary_key
        self.logger = get_logger(self.__class__.__name__)

    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self.pool is not None

    async def query(
        self,
        sql: str,
        params: Optional[List[Any]] = None
    ) -> Optional[asyncpg.Record]:
        """
        Execute a raw query with error handling.

        Args:
            sql: SQL query string
            params: Query parameters

        Returns:
            First result row or None

        Raises:
            RuntimeError: Database not connected
        """
        if not self.is_connected():
            raise RuntimeError("Database not connected")

        if params is None:
            params = []

        try:
            async with self.pool.acquire() as conn:
                return await conn.fetchrow(sql, *params)
        except Exception as e:
            self.logger.error(f"Query failed: {e}")
            raise

    async def find_by_id(self, id: Any) -> Optional[Dict[str, Any]]:
        """
        Find a single record by primary key.

        Args:
            id: Primary key value

        Returns:
            Record as dict or None
        """
        sql = f"""
            SELECT * FROM {self.table_name}
            WHERE {self.primary_key} = $1
        """
        row = await self.query(sql, [id])
        return dict(row) if row else None

    async def delete(self, id: Any) -> bool:
        """
        Delete a record by primary key.

        Args:
            id: Primary key value

        Returns:
            True if deleted, False otherwise
        """
        sql = f"""
            DELETE FROM {self.table_name}
            WHERE {self.primary_key} = $1
        """

        if not self.is_connected():
            self.logger.warning("Database not connected, delete skipped")
            return False

        try:
            async with self.pool.acquire() as conn:
                result = await conn.execute(sql, id)
                # Result is typically "DELETE N" where N is row count
                return bool(result) and result.startswith("DELETE") and int(result.split()[1]) > 0
        except Exception as e:
            self.logger.error(f"Delete failed: {e}")
            raise
