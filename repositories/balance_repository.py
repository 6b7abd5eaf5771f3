"""
Balance Repository
Persistent storage behind the economy ledger
"""

import asyncio
from typing import Dict, Optional, Protocol

import asyncpg

from repositories.base_repository import BaseRepository


class BalanceStore(Protocol):
    """Key-value store of user balances."""

    async def get(self, user_id: str) -> Optional[int]:
        ...

    async def set(self, user_id: str, value: int) -> None:
        ...


class BalanceRepository(BaseRepository):
    """Repository for balances table."""

    def __init__(self, pool: asyncpg.Pool):
        """
        Create BalanceRepository instance.

        Args:
            pool: PostgreSQL connection pool
        """
        super().__init__(pool, "balances", "user_id")

    async def get(self, user_id: str) -> Optional[int]:
        """
        Get a user's stored balance.

        Args:
            user_id: User ID

        Returns:
            Balance or None if the user has no record
        """
        row = await self.find_by_id(str(user_id))
        if not row:
            return None
        return int(row["balance"])

    async def set(self, user_id: str, value: int) -> None:
        """
        Store a user's balance.

        Errors propagate so the ledger never reports a charge that was not saved.

        Args:
            user_id: User ID
            value: New balance
        """
        sql = f"""
            INSERT INTO {self.table_name} (user_id, balance, updated_at)
            VALUES ($1, $2, CURRENT_TIMESTAMP)
            ON CONFLICT (user_id)
            DO UPDATE SET balance = $2, updated_at = CURRENT_TIMESTAMP
        """
        await self.query(sql, [str(user_id), int(value)])


class MemoryBalanceStore:
    """In-process balance store used when no database is configured."""

    def __init__(self, initial: Optional[Dict[str, int]] = None):
        self._balances: Dict[str, int] = dict(initial or {})

    async def get(self, user_id: str) -> Optional[int]:
        # Yield like a real store would, so callers cannot rely on atomic reads
        await asyncio.sleep(0)
        return self._balances.get(str(user_id))

    async def set(self, user_id: str, value: int) -> None:
        await asyncio.sleep(0)
        self._balances[str(user_id)] = int(value)

    def __contains__(self, user_id: object) -> bool:
        return str(user_id) in self._balances
