"""
Discord platform adapter.
Implements the operations the command framework needs on top of discord.py.
"""

import io
from typing import Any, Optional

import discord

from commands.context import MemberInfo, MessageEvent
from commands.permissions import Caller, Capability
from utils.discord import DiscordUtils
from utils.logger import get_logger

logger = get_logger("Platform")


class DiscordPlatform:
    """discord.py implementation of the framework's platform contract."""

    def __init__(self, client: discord.Client):
        self.client = client

    @staticmethod
    def to_event(message: discord.Message) -> MessageEvent:
        """Convert a discord.py message into an inbound event."""
        return MessageEvent(
            author_id=str(message.author.id),
            guild_id=str(message.guild.id) if message.guild else None,
            content=message.content or "",
            channel=message.channel,
            message=message,
        )

    async def send_message(
        self,
        channel: Any,
        content: Optional[str] = None,
        file: Optional[bytes] = None,
        filename: Optional[str] = None,
    ) -> Optional[discord.Message]:
        kwargs = {}
        if file is not None:
            kwargs["file"] = discord.File(io.BytesIO(file), filename=filename or "attachment")
        if content is not None:
            content = DiscordUtils.truncate(content)
        return await DiscordUtils.safe_send(channel, content, **kwargs)

    async def delete_message(self, message: Any) -> bool:
        return await DiscordUtils.safe_delete(message)

    async def _member(self, guild_id: str, user_id: int) -> Optional[discord.Member]:
        guild = self.client.get_guild(int(guild_id))
        if guild is None:
            return None
        member = guild.get_member(user_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id)
        except (discord.NotFound, discord.Forbidden):
            return None
        except discord.HTTPException as e:
            logger.warning(f"Member lookup failed for {user_id} in {guild_id}: {e}")
            return None

    async def get_member(self, guild_id: Optional[str], user_ref: str) -> Optional[MemberInfo]:
        try:
            user_id = int(user_ref)
        except (TypeError, ValueError):
            return None

        if guild_id:
            user = await self._member(guild_id, user_id)
        else:
            user = self.client.get_user(user_id)
            if user is None:
                try:
                    user = await self.client.fetch_user(user_id)
                except discord.HTTPException:
                    user = None

        if user is None:
            return None

        return MemberInfo(
            user_id=str(user.id),
            display_name=user.display_name,
            avatar_url=str(user.display_avatar.url),
        )

    async def bot_has_capability(
        self, guild_id: Optional[str], channel: Any, capability: Capability
    ) -> bool:
        # Private channels grant everything the framework asks for
        if not guild_id:
            return True

        guild = self.client.get_guild(int(guild_id))
        if guild is None or guild.me is None:
            return False
        permissions = channel.permissions_for(guild.me)
        return bool(getattr(permissions, capability.value, False))

    async def caller_profile(self, guild_id: Optional[str], user_id: str) -> Caller:
        if not guild_id:
            return Caller(user_id=str(user_id))

        member = await self._member(guild_id, int(user_id))
        if member is None:
            return Caller(user_id=str(user_id))

        return Caller(
            user_id=str(user_id),
            is_guild_admin=member.guild_permissions.administrator,
            role_ids=frozenset(str(role.id) for role in member.roles),
        )
