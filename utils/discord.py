"""
Discord Utilities
Helper functions for Discord interactions
"""

from typing import Any, Optional


class DiscordUtils:
    """Utility class for Discord-related helper functions."""

    @staticmethod
    async def safe_delete(message: Any) -> bool:
        """
        Safely delete a message (suppress errors).

        Args:
            message: Discord message

        Returns:
            True if deleted successfully, False otherwise
        """
        if not message or not hasattr(message, "delete"):
            return False
        try:
            await message.delete()
            return True
        except Exception:
            return False

    @staticmethod
    async def safe_send(channel: Any, content: Optional[str] = None, **kwargs: Any) -> Optional[Any]:
        """
        Safely send a message to a channel (suppress errors).

        Args:
            channel: Discord channel
            content: Message content
            **kwargs: Extra send arguments, e.g. ``file``

        Returns:
            Sent message or None if failed
        """
        if not channel or not hasattr(channel, "send"):
            return None
        try:
            return await channel.send(content, **kwargs)
        except Exception:
            return None

    @staticmethod
    def truncate(content: str, max_length: int = 2000) -> str:
        """Cut content to Discord's message limit."""
        if len(content) <= max_length:
            return content
        return content[: max_length - 3] + "..."
