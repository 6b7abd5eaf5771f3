"""
Command Registry
Centralized command registration and management
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Iterator, List, Optional, Tuple, Union

from commands.errors import DuplicateAliasError, DuplicateNameError, NotFoundError
from commands.permissions import Capability, PermissionLevel
from utils.logger import get_logger

# Command body type alias: (ctx, args, level) -> awaitable
CommandHandler = Callable[[Any, List[str], PermissionLevel], Awaitable[Any]]


@dataclass(frozen=True)
class Cost:
    """
    Price of a command, either fixed or a function of the caller's level.

    Use ``Cost.fixed(n)`` or ``Cost.by_level(fn)``; ``Cost.coerce`` accepts
    the loose forms found in command configs (int, callable, None).
    """

    amount: int = 0
    schedule: Optional[Callable[[PermissionLevel], int]] = field(default=None, compare=False)

    @classmethod
    def fixed(cls, amount: int) -> "Cost":
        if amount < 0:
            raise ValueError(f"Cost cannot be negative: {amount}")
        return cls(amount=int(amount))

    @classmethod
    def by_level(cls, schedule: Callable[[PermissionLevel], int]) -> "Cost":
        return cls(schedule=schedule)

    @classmethod
    def coerce(cls, value: Union["Cost", int, Callable[[PermissionLevel], int], None]) -> "Cost":
        if value is None:
            return FREE
        if isinstance(value, Cost):
            return value
        if isinstance(value, bool):
            raise TypeError("Cost must be an int or a callable")
        if isinstance(value, int):
            return cls.fixed(value)
        if callable(value):
            return cls.by_level(value)
        raise TypeError(f"Unsupported cost: {value!r}")

    @property
    def is_fixed(self) -> bool:
        return self.schedule is None

    def evaluate(self, level: PermissionLevel) -> int:
        """Amount to charge a caller at ``level``."""
        if self.schedule is None:
            return self.amount
        amount = int(self.schedule(level))
        if amount < 0:
            raise ValueError(f"Cost schedule returned a negative amount for {level!s}: {amount}")
        return amount


FREE = Cost()


@dataclass(frozen=True)
class CommandDefinition:
    """Definition of a command."""

    name: str
    description: str = ""
    category: str = "General"
    usage: str = ""
    extended: str = ""
    aliases: Tuple[str, ...] = ()
    cost: Cost = FREE
    bot_perms: FrozenSet[Capability] = frozenset()
    perm_level: PermissionLevel = PermissionLevel.USER
    guild_only: bool = False

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "CommandDefinition":
        """
        Build a definition from a command config dict.

        Args:
            config: Command configuration dict with keys:
                - name: Command name (required)
                - description, category, usage, extended: display text
                - aliases: List of aliases
                - cost: int, callable(level) -> int, or Cost
                - bot_perms: Capability names the bot needs
                - perm_level: Minimum permission level name
                - guild_only: Whether command requires guild

        Returns:
            CommandDefinition

        Raises:
            KeyError, ValueError, TypeError: On malformed config
        """
        name = str(config["name"]).strip().lower()
        if not name or " " in name:
            raise ValueError(f"Invalid command name: {config['name']!r}")

        return cls(
            name=name,
            description=config.get("description", ""),
            category=config.get("category", "General"),
            usage=config.get("usage", name),
            extended=config.get("extended", ""),
            aliases=tuple(str(a).strip().lower() for a in config.get("aliases", [])),
            cost=Cost.coerce(config.get("cost")),
            bot_perms=frozenset(Capability.parse(p) for p in config.get("bot_perms", [])),
            perm_level=PermissionLevel.parse(config.get("perm_level", PermissionLevel.USER)),
            guild_only=bool(config.get("guild_only", False)),
        )


class Command:
    """Registered command with definition and handler."""

    __slots__ = ("_definition", "_handler", "_source_location")

    def __init__(
        self,
        definition: CommandDefinition,
        handler: CommandHandler,
        source_location: Optional[str] = None,
    ):
        self._definition = definition
        self._handler = handler
        self._source_location = source_location

    def __repr__(self) -> str:
        return f"<Command {self.name} from {self._source_location or 'inline'}>"

    @property
    def definition(self) -> CommandDefinition:
        return self._definition

    @property
    def handler(self) -> CommandHandler:
        return self._handler

    @property
    def source_location(self) -> Optional[str]:
        return self._source_location

    @property
    def name(self) -> str:
        return self._definition.name

    @property
    def description(self) -> str:
        return self._definition.description

    @property
    def category(self) -> str:
        return self._definition.category

    @property
    def usage(self) -> str:
        return self._definition.usage

    @property
    def extended(self) -> str:
        return self._definition.extended

    @property
    def aliases(self) -> Tuple[str, ...]:
        return self._definition.aliases

    @property
    def cost(self) -> Cost:
        return self._definition.cost

    @property
    def bot_perms(self) -> FrozenSet[Capability]:
        return self._definition.bot_perms

    @property
    def min_level(self) -> PermissionLevel:
        return self._definition.perm_level

    @property
    def guild_only(self) -> bool:
        return self._definition.guild_only

    async def run(self, ctx: Any, args: List[str], level: PermissionLevel) -> Any:
        return await self._handler(ctx, args, level)


class CommandView:
    """Restartable, insertion-ordered view over registered commands."""

    def __init__(self, commands: Dict[str, Command]):
        self._commands = commands

    def __iter__(self) -> Iterator[Command]:
        # Snapshot per pass so a concurrent reload cannot break iteration.
        return iter(tuple(self._commands.values()))

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._commands


class CommandRegistry:
    """Centralized command registration and management."""

    def __init__(self):
        self.logger = get_logger("CommandRegistry")
        self.commands: Dict[str, Command] = {}
        self.aliases: Dict[str, str] = {}
        self._write_lock = threading.RLock()

    def register(self, command: Command) -> "CommandRegistry":
        """
        Register a command and all of its aliases.

        Every collision check runs before anything is inserted, so a failed
        registration leaves the registry unchanged.

        Args:
            command: Command to register

        Returns:
            Self for chaining

        Raises:
            DuplicateNameError: Name already used as a name or alias
            DuplicateAliasError: An alias collides with a name or alias
        """
        name = command.name.lower()

        with self._write_lock:
            if name in self.commands:
                raise DuplicateNameError(name)
            if name in self.aliases:
                raise DuplicateNameError(name)

            seen = set()
            for alias in command.aliases:
                alias = alias.lower()
                if alias == name or alias in seen:
                    raise DuplicateAliasError(alias, name)
                if alias in self.commands:
                    raise DuplicateAliasError(alias, alias)
                if alias in self.aliases:
                    raise DuplicateAliasError(alias, self.aliases[alias])
                seen.add(alias)

            # Aliases are only reachable through the primary entry, so insert it first.
            self.commands[name] = command
            for alias in seen:
                self.aliases[alias] = name

        self.logger.debug(f"Registered command: {name}")
        return self

    def unregister(self, name: str) -> Command:
        """
        Remove a command and every alias pointing to it.

        Args:
            name: Primary command name

        Returns:
            The removed command

        Raises:
            NotFoundError: No command is registered under that name
        """
        normalized = name.lower()

        with self._write_lock:
            if normalized not in self.commands:
                raise NotFoundError(name)

            for alias in [a for a, target in self.aliases.items() if target == normalized]:
                del self.aliases[alias]
            command = self.commands.pop(normalized)

        self.logger.debug(f"Unregistered command: {normalized}")
        return command

    def get(self, name: str) -> Optional[Command]:
        """
        Get a command by name or alias.

        Args:
            name: Command name or alias

        Returns:
            Command or None if not found
        """
        normalized = name.lower()

        # Check direct command
        command = self.commands.get(normalized)
        if command is not None:
            return command

        # Check alias
        alias_target = self.aliases.get(normalized)
        if alias_target:
            return self.commands.get(alias_target)

        return None

    def resolve(self, name: str) -> Command:
        """
        Get a command by name or alias.

        Raises:
            NotFoundError: Nothing registered under that name or alias
        """
        command = self.get(name)
        if command is None:
            raise NotFoundError(name)
        return command

    def has(self, name: str) -> bool:
        normalized = name.lower()
        return normalized in self.commands or normalized in self.aliases

    def list_commands(self) -> CommandView:
        """All registered commands in insertion order."""
        return CommandView(self.commands)

    def generate_help(self, level: PermissionLevel = PermissionLevel.OWNER, prefix: str = "") -> str:
        """
        Generate help text for every command available at ``level``.

        Args:
            level: Caller's permission level
            prefix: Command prefix to display

        Returns:
            Formatted help string
        """
        lines = [
            "📖 **Command List**",
            "",
        ]

        grouped: Dict[str, List[Command]] = {}
        for cmd in self.list_commands():
            if cmd.min_level <= level:
                grouped.setdefault(cmd.category, []).append(cmd)

        for category in sorted(grouped):
            icon = self._get_category_icon(category)
            lines.append(f"**{icon} {category}:**")

            for cmd in sorted(grouped[category], key=lambda c: c.name):
                cost = f" 💰{cmd.cost.amount}" if cmd.cost.is_fixed and cmd.cost.amount else ""
                lines.append(f"• `{prefix}{cmd.name}`{cost} - {cmd.description}")

            lines.append("")

        lines.append(f"Use `{prefix}help <command>` for details.")
        return "\n".join(lines)

    def generate_command_help(self, name: str, prefix: str = "") -> Optional[str]:
        """
        Generate detailed help for a specific command.

        Args:
            name: Command name or alias
            prefix: Command prefix to display

        Returns:
            Formatted help string or None if command not found
        """
        cmd = self.get(name)
        if not cmd:
            return None

        lines = [
            f"📖 **Command:** `{cmd.name}`",
            "",
            f"**Description:** {cmd.description}",
            f"**Usage:** `{prefix}{cmd.usage}`",
            f"**Level:** {cmd.min_level!s}",
        ]

        if cmd.aliases:
            aliases_formatted = ", ".join(f"`{a}`" for a in cmd.aliases)
            lines.append(f"**Aliases:** {aliases_formatted}")

        if cmd.cost.is_fixed:
            if cmd.cost.amount:
                lines.append(f"**Cost:** {cmd.cost.amount}")
        else:
            lines.append("**Cost:** depends on your level")

        if cmd.extended:
            lines.append("")
            lines.append(cmd.extended)

        return "\n".join(lines)

    def _get_category_icon(self, category: str) -> str:
        icons = {
            "Fun": "🎉",
            "Economy": "💰",
            "System": "⚙️",
            "Miscellaneous": "📋",
            "General": "📋",
        }
        return icons.get(category, "•")
