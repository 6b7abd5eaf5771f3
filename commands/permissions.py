"""
Permission Resolver
Maps a caller to a permission level and gates command access
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import FrozenSet, Iterable, Optional, Union

from commands.context import GuildSettings


class PermissionLevel(IntEnum):
    """Ordered authority tiers. Higher value outranks lower."""

    USER = 0
    TRUSTED = 1
    MODERATOR = 2
    ADMINISTRATOR = 3
    BOT_ADMIN = 4
    OWNER = 5

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    def __str__(self) -> str:
        return self.display_name

    @classmethod
    def parse(cls, value: Union["PermissionLevel", int, str]) -> "PermissionLevel":
        """
        Parse a level from an enum member, an int or a name.

        Accepts display names ("Bot Admin") and member names ("BOT_ADMIN"),
        case-insensitively.

        Raises:
            ValueError: If the value names no level
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            key = value.strip().upper().replace(" ", "_")
            if key in cls.__members__:
                return cls[key]
        raise ValueError(f"Unknown permission level: {value!r}")


_DISPLAY_NAMES = {
    PermissionLevel.USER: "User",
    PermissionLevel.TRUSTED: "Trusted",
    PermissionLevel.MODERATOR: "Moderator",
    PermissionLevel.ADMINISTRATOR: "Administrator",
    PermissionLevel.BOT_ADMIN: "Bot Admin",
    PermissionLevel.OWNER: "Bot Owner",
}


class Capability(str, Enum):
    """Platform permissions the bot itself may need to run a command."""

    SEND_MESSAGES = "send_messages"
    ATTACH_FILES = "attach_files"
    EMBED_LINKS = "embed_links"
    MANAGE_MESSAGES = "manage_messages"
    READ_MESSAGE_HISTORY = "read_message_history"
    ADD_REACTIONS = "add_reactions"

    def __str__(self) -> str:
        return self.name

    @classmethod
    def parse(cls, value: Union["Capability", str]) -> "Capability":
        if isinstance(value, cls):
            return value
        key = str(value).strip().upper()
        if key in cls.__members__:
            return cls[key]
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class Caller:
    """Snapshot of who is invoking a command, taken before resolution."""

    user_id: str
    is_guild_admin: bool = False
    role_ids: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class PermissionResult:
    """Outcome of a permission check."""

    level: PermissionLevel
    required: PermissionLevel

    @property
    def allowed(self) -> bool:
        return self.level >= self.required

    def __bool__(self) -> bool:
        return self.allowed


class PermissionResolver:
    """
    Resolves permission levels from configured authority sources.

    The resolver holds only injected configuration. Every method is a pure
    function of its arguments and never raises.
    """

    def __init__(
        self,
        owner_id: Optional[str] = None,
        bot_admins: Iterable[str] = (),
        trusted_users: Iterable[str] = (),
    ):
        self.owner_id = str(owner_id) if owner_id else None
        self.bot_admins = frozenset(str(u) for u in bot_admins)
        self.trusted_users = frozenset(str(u) for u in trusted_users)

    def resolve(self, caller: Caller, settings: Optional[GuildSettings] = None) -> PermissionLevel:
        """
        Resolve the caller's level. First matching source wins.

        Args:
            caller: Caller snapshot
            settings: Guild settings, or None in a private context

        Returns:
            Resolved permission level
        """
        user_id = str(caller.user_id)

        if self.owner_id and user_id == self.owner_id:
            return PermissionLevel.OWNER

        if user_id in self.bot_admins:
            return PermissionLevel.BOT_ADMIN

        if settings is not None:
            if caller.is_guild_admin:
                return PermissionLevel.ADMINISTRATOR
            if settings.admin_role and settings.admin_role in caller.role_ids:
                return PermissionLevel.ADMINISTRATOR
            if settings.mod_role and settings.mod_role in caller.role_ids:
                return PermissionLevel.MODERATOR

        if user_id in self.trusted_users:
            return PermissionLevel.TRUSTED

        return PermissionLevel.USER

    @staticmethod
    def required_level(command, settings: Optional[GuildSettings] = None) -> PermissionLevel:
        """Command's minimum level after applying the guild's override, if any."""
        if settings is not None:
            override = settings.level_overrides.get(command.name)
            if override is not None:
                try:
                    return PermissionLevel.parse(override)
                except ValueError:
                    pass
        return command.min_level

    def check(
        self,
        caller: Caller,
        command,
        settings: Optional[GuildSettings] = None,
    ) -> PermissionResult:
        """Resolve the caller's level and compare it against the command."""
        return PermissionResult(
            level=self.resolve(caller, settings),
            required=self.required_level(command, settings),
        )
