"""
Settings Repository
Handles per-guild settings storage and retrieval
"""

import json
from dataclasses import replace
from typing import Any, Dict, Iterable, Optional

import asyncpg

from commands.context import GuildSettings
from commands.errors import SettingsValidationError
from repositories.base_repository import BaseRepository
from utils.validation import ValidationUtils


def apply_setting(
    settings: GuildSettings,
    key: str,
    value: Optional[str],
    known_commands: Optional[Iterable[str]] = None,
) -> GuildSettings:
    """
    Return a copy of ``settings`` with one key changed.

    ``value=None`` resets the key to its default.

    Raises:
        SettingsValidationError: Unknown key or invalid value
    """
    result = ValidationUtils.validate_setting(key, value, known_commands)
    if not result:
        raise SettingsValidationError(key, result.error or "invalid value")

    field_name, command = result.value
    if command is None:
        return replace(settings, **{field_name: result.sanitized})

    overrides = dict(getattr(settings, field_name))
    if result.sanitized is None:
        overrides.pop(command, None)
    else:
        overrides[command] = result.sanitized
    return replace(settings, **{field_name: overrides})


class SettingsRepository(BaseRepository):
    """Repository for guild_settings table."""

    def __init__(self, pool: asyncpg.Pool):
        """
        Create SettingsRepository instance.

        Args:
            pool: PostgreSQL connection pool
        """
        super().__init__(pool, "guild_settings", "guild_id")

    async def get(self, guild_id: str) -> GuildSettings:
        """
        Get a guild's settings.

        Args:
            guild_id: Guild ID

        Returns:
            Stored settings, or defaults if none are stored
        """
        row = await self.find_by_id(str(guild_id))
        if not row:
            return GuildSettings(guild_id=str(guild_id))

        value = row.get("value")
        try:
            data = json.loads(value) if isinstance(value, str) else value
        except (json.JSONDecodeError, TypeError):
            self.logger.warning(f"Corrupt settings for guild {guild_id}, using defaults")
            data = None
        return GuildSettings.from_dict(str(guild_id), data)

    async def save(self, settings: GuildSettings) -> bool:
        """
        Store a guild's settings.

        Args:
            settings: Settings to store

        Returns:
            True if successful
        """
        sql = f"""
            INSERT INTO {self.table_name} (guild_id, value, updated_at)
            VALUES ($1, $2, CURRENT_TIMESTAMP)
            ON CONFLICT (guild_id)
            DO UPDATE SET value = $2, updated_at = CURRENT_TIMESTAMP
        """

        try:
            await self.query(sql, [settings.guild_id, json.dumps(settings.to_dict())])
            return True
        except Exception as e:
            self.logger.error(f"Failed to save settings: {e}")
            return False

    async def reset(self, guild_id: str) -> bool:
        """
        Delete a guild's settings, restoring defaults.

        Args:
            guild_id: Guild ID

        Returns:
            True if deleted
        """
        return await self.delete(str(guild_id))


class MemorySettingsStore:
    """In-process settings store used when no database is configured."""

    def __init__(self, initial: Optional[Dict[str, Dict[str, Any]]] = None):
        self._settings: Dict[str, GuildSettings] = {
            str(guild_id): GuildSettings.from_dict(str(guild_id), data)
            for guild_id, data in (initial or {}).items()
        }

    async def get(self, guild_id: str) -> GuildSettings:
        return self._settings.get(str(guild_id)) or GuildSettings(guild_id=str(guild_id))

    async def save(self, settings: GuildSettings) -> bool:
        self._settings[settings.guild_id] = settings
        return True

    async def reset(self, guild_id: str) -> bool:
        return self._settings.pop(str(guild_id), None) is not None
