"""
Database repositories for the guild bot.
"""

from .base_repository import BaseRepository
from .balance_repository import BalanceRepository, BalanceStore, MemoryBalanceStore
from .settings_repository import MemorySettingsStore, SettingsRepository, apply_setting

__all__ = [
    "BaseRepository",
    "BalanceRepository",
    "BalanceStore",
    "MemoryBalanceStore",
    "MemorySettingsStore",
    "SettingsRepository",
    "apply_setting",
]
