"""
Invocation Context
Data passed between the platform adapter, the dispatcher and command bodies
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

if TYPE_CHECKING:
    from commands.permissions import Capability, Caller


@dataclass(frozen=True)
class GuildSettings:
    """Per-guild configuration, read-only from the dispatcher's point of view."""

    guild_id: str
    prefix: Optional[str] = None
    admin_role: Optional[str] = None
    mod_role: Optional[str] = None
    cost_overrides: Dict[str, int] = field(default_factory=dict)
    level_overrides: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, guild_id: str, data: Optional[Dict[str, Any]]) -> "GuildSettings":
        data = data or {}
        return cls(
            guild_id=str(guild_id),
            prefix=data.get("prefix"),
            admin_role=_optional_str(data.get("admin_role")),
            mod_role=_optional_str(data.get("mod_role")),
            cost_overrides={k: int(v) for k, v in (data.get("cost_overrides") or {}).items()},
            level_overrides=dict(data.get("level_overrides") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prefix": self.prefix,
            "admin_role": self.admin_role,
            "mod_role": self.mod_role,
            "cost_overrides": dict(self.cost_overrides),
            "level_overrides": dict(self.level_overrides),
        }


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


@dataclass(frozen=True)
class MessageEvent:
    """Inbound message as seen by the dispatcher."""

    author_id: str
    content: str
    channel: Any
    guild_id: Optional[str] = None
    message: Any = None


@dataclass(frozen=True)
class MemberInfo:
    """Guild member details a command may need."""

    user_id: str
    display_name: str
    avatar_url: Optional[str] = None


class Platform(Protocol):
    """Operations the framework needs from the chat platform."""

    async def send_message(
        self,
        channel: Any,
        content: Optional[str] = None,
        file: Optional[bytes] = None,
        filename: Optional[str] = None,
    ) -> Any:
        ...

    async def delete_message(self, message: Any) -> bool:
        ...

    async def get_member(self, guild_id: Optional[str], user_ref: str) -> Optional[MemberInfo]:
        ...

    async def bot_has_capability(
        self, guild_id: Optional[str], channel: Any, capability: "Capability"
    ) -> bool:
        ...

    async def caller_profile(self, guild_id: Optional[str], user_id: str) -> "Caller":
        ...


class ImageService(Protocol):
    """Renders image replies. Provided by the application."""

    async def wanted_poster(self, avatar_url: str) -> bytes:
        ...


class CommandContext:
    """Everything a command body can reach while it runs."""

    def __init__(
        self,
        event: MessageEvent,
        platform: Platform,
        services: Dict[str, Any],
        settings: Optional[GuildSettings] = None,
        prefix: str = "",
    ):
        self.event = event
        self.platform = platform
        self.services = services
        self.settings = settings
        self.prefix = prefix
        self.partial_success = False
        self.sent: List[Any] = []

    @property
    def author_id(self) -> str:
        return self.event.author_id

    @property
    def guild_id(self) -> Optional[str]:
        return self.event.guild_id

    @property
    def channel(self) -> Any:
        return self.event.channel

    @property
    def registry(self):
        return self.services.get("registry")

    @property
    def loader(self):
        return self.services.get("loader")

    @property
    def ledger(self):
        return self.services.get("ledger")

    @property
    def resolver(self):
        return self.services.get("resolver")

    @property
    def settings_store(self):
        return self.services.get("settings_store")

    @property
    def images(self) -> Optional[ImageService]:
        return self.services.get("images")

    def mark_partial_success(self) -> None:
        """Keep the charge even if the body raises after this point."""
        self.partial_success = True

    async def send(
        self,
        content: Optional[str] = None,
        file: Optional[bytes] = None,
        filename: Optional[str] = None,
    ) -> Any:
        """Send to the invoking channel."""
        sent = await self.platform.send_message(self.channel, content, file=file, filename=filename)
        if sent is not None:
            self.sent.append(sent)
        return sent

    async def reply(self, content: str) -> Any:
        """Send a message addressed to the caller."""
        return await self.send(f"<@{self.author_id}>, {content}")
