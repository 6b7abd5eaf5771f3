"""
Economy Manager
Per-user virtual currency ledger with serialized charge and refund
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional, Tuple

from commands.errors import InsufficientFundsError
from commands.permissions import PermissionLevel
from repositories.balance_repository import BalanceStore
from utils.logger import LoggerMixin

DEFAULT_STARTING_BALANCE = 100


class EconomyLedger(LoggerMixin):
    """
    Owns user balances.

    Balances are only changed through ``charge`` and ``refund``. Both take a
    per-user lock, so two invocations by the same user cannot interleave
    their read-check-write steps. Different users never wait on each other.
    """

    def __init__(self, store: BalanceStore, starting_balance: int = DEFAULT_STARTING_BALANCE):
        super().__init__("Economy")
        self.store = store
        self.starting_balance = starting_balance
        # user_id -> (lock, number of holders and waiters)
        self._locks: Dict[str, Tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def _user_lock(self, user_id: str) -> AsyncIterator[None]:
        lock, users = self._locks.get(user_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[user_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[user_id]
            if users == 1:
                del self._locks[user_id]
            else:
                self._locks[user_id] = (lock, users - 1)

    async def get_balance(self, user_id: str) -> int:
        """
        Current balance. Reading never creates a record.

        Args:
            user_id: User ID

        Returns:
            Stored balance, or the starting balance for unknown users
        """
        value = await self.store.get(str(user_id))
        return self.starting_balance if value is None else value

    async def charge(self, user_id: str, amount: int) -> int:
        """
        Deduct ``amount`` from the user's balance.

        Args:
            user_id: User ID
            amount: Non-negative amount

        Returns:
            New balance

        Raises:
            InsufficientFundsError: Balance is lower than ``amount``
            ValueError: Negative amount
        """
        if amount < 0:
            raise ValueError(f"Charge amount cannot be negative: {amount}")

        user_id = str(user_id)
        async with self._user_lock(user_id):
            balance = await self.get_balance(user_id)
            if amount > balance:
                raise InsufficientFundsError(user_id, amount, balance)

            new_balance = balance - amount
            await self.store.set(user_id, new_balance)

        self.debug(f"Charged {user_id}: -{amount} -> {new_balance}")
        return new_balance

    async def refund(self, user_id: str, amount: int) -> Optional[int]:
        """
        Credit ``amount`` back to the user. Never raises.

        Args:
            user_id: User ID
            amount: Amount to return

        Returns:
            New balance, or None if the store could not be updated
        """
        user_id = str(user_id)
        if amount <= 0:
            try:
                return await self.get_balance(user_id)
            except Exception as e:
                self.error(f"Balance lookup for {user_id} failed: {e}")
                return None

        async with self._user_lock(user_id):
            try:
                balance = await self.get_balance(user_id)
                new_balance = balance + amount
                await self.store.set(user_id, new_balance)
            except Exception as e:
                self.error(f"Refund of {amount} to {user_id} failed: {e}")
                return None

        self.debug(f"Refunded {user_id}: +{amount} -> {new_balance}")
        return new_balance

    @staticmethod
    def resolve_cost(command, level: PermissionLevel) -> int:
        """Price of ``command`` for a caller at ``level``."""
        return command.cost.evaluate(level)
