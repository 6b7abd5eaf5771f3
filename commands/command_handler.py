"""
Command Handler
Parses inbound messages and runs commands through permission and economy gates
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from commands.command_registry import Command, CommandRegistry
from commands.context import CommandContext, GuildSettings, MessageEvent, Platform
from commands.errors import (
    BotError,
    CommandExecutionError,
    InsufficientFundsError,
    MissingBotCapabilityError,
    NotFoundError,
    PermissionDeniedError,
)
from commands.permissions import PermissionLevel, PermissionResolver
from managers.economy_manager import EconomyLedger
from utils.error_handler import ErrorHandler, get_error_handler
from utils.logger import get_logger
from utils.monitoring import Monitoring

# Command prefix used when a guild has none configured
DEFAULT_PREFIX = "~"


class InvocationState(Enum):
    RECEIVED = "received"
    RESOLVED = "resolved"
    PERMISSION_CHECKED = "permission_checked"
    CHARGED = "charged"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
    # Terminal states outside the happy path
    IGNORED = "ignored"
    REJECTED = "rejected"


@dataclass
class InvocationResult:
    """What happened to one inbound message."""

    state: InvocationState
    command: Optional[str] = None
    level: Optional[PermissionLevel] = None
    charged: int = 0
    refunded: int = 0
    error: Optional[BotError] = None


class CommandHandler:
    """
    Dispatches inbound messages to registered commands.

    Each message runs independently. The handler captures the command
    object at lookup time, so a concurrent reload never changes a call that
    is already past resolution.
    """

    def __init__(
        self,
        platform: Platform,
        registry: CommandRegistry,
        ledger: EconomyLedger,
        resolver: PermissionResolver,
        settings_store: Any = None,
        default_prefix: str = DEFAULT_PREFIX,
        report_unknown: bool = False,
        services: Optional[Dict[str, Any]] = None,
        monitoring: Optional[Monitoring] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.logger = get_logger("Command")
        self.platform = platform
        self.registry = registry
        self.ledger = ledger
        self.resolver = resolver
        self.settings_store = settings_store
        self.default_prefix = default_prefix
        self.report_unknown = report_unknown
        self.monitoring = monitoring
        self.error_handler = error_handler or get_error_handler()

        self.services: Dict[str, Any] = {
            "registry": registry,
            "ledger": ledger,
            "resolver": resolver,
            "settings_store": settings_store,
            "monitoring": monitoring,
        }
        self.services.update(services or {})

    async def handle(self, event: MessageEvent) -> InvocationResult:
        """
        Handle an incoming message. Never raises.

        Args:
            event: Inbound message

        Returns:
            InvocationResult describing the terminal state
        """
        try:
            return await self._dispatch(event)
        except Exception as error:
            self.error_handler.handle_exception(error, "dispatch")
            if self.monitoring:
                self.monitoring.record_error()
            return InvocationResult(
                InvocationState.FAILED,
                error=error if isinstance(error, BotError) else None,
            )

    async def _dispatch(self, event: MessageEvent) -> InvocationResult:
        if self.monitoring:
            self.monitoring.record_message()

        settings = await self._load_settings(event.guild_id)
        prefix = (settings.prefix if settings and settings.prefix else None) or self.default_prefix

        parsed = self.parse_command(event.content, prefix)
        if parsed is None:
            return InvocationResult(InvocationState.IGNORED)
        name, args = parsed

        # Received -> Resolved
        command = self.registry.get(name)
        if command is None:
            if not self.report_unknown:
                return InvocationResult(InvocationState.IGNORED)
            return await self._reject(event, NotFoundError(name))

        if command.guild_only and not event.guild_id:
            await self._send(event, "❌ This command must be used in a server")
            return InvocationResult(InvocationState.REJECTED, command=command.name)

        # Resolved -> PermissionChecked
        caller = await self.platform.caller_profile(event.guild_id, event.author_id)
        permission = self.resolver.check(caller, command, settings)
        level = permission.level
        if not permission:
            if self.monitoring:
                self.monitoring.record_denied()
            return await self._reject(
                event,
                PermissionDeniedError(command.name, level, permission.required),
                command,
                level,
            )

        # Capabilities are checked before any charge
        missing = [
            capability
            for capability in sorted(command.bot_perms, key=lambda c: c.name)
            if not await self.platform.bot_has_capability(event.guild_id, event.channel, capability)
        ]
        if missing:
            return await self._reject(event, MissingBotCapabilityError(command.name, missing), command, level)

        # PermissionChecked -> Charged
        cost = self.effective_cost(command, level, settings)
        charged = 0
        if cost > 0:
            try:
                await self.ledger.charge(event.author_id, cost)
            except InsufficientFundsError as error:
                return await self._reject(event, error, command, level)
            charged = cost
            if self.monitoring:
                self.monitoring.record_charge(cost)

        # Charged -> Executing
        ctx = CommandContext(event, self.platform, self.services, settings=settings, prefix=prefix)
        try:
            self.logger.debug(f"Executing: {command.name} for {event.author_id}")
            await command.run(ctx, args, level)
        except Exception as cause:
            return await self._fail(event, ctx, command, level, charged, cause)

        if self.monitoring:
            self.monitoring.record_command()
        return InvocationResult(InvocationState.COMPLETED, command=command.name, level=level, charged=charged)

    async def _fail(
        self,
        event: MessageEvent,
        ctx: CommandContext,
        command: Command,
        level: PermissionLevel,
        charged: int,
        cause: Exception,
    ) -> InvocationResult:
        error = CommandExecutionError(command.name, cause)
        error.__cause__ = cause
        self.error_handler.handle_exception(error, command.name)
        if self.monitoring:
            self.monitoring.record_error()

        refunded = 0
        if charged and not ctx.partial_success:
            if await self.ledger.refund(event.author_id, charged) is not None:
                refunded = charged
                if self.monitoring:
                    self.monitoring.record_refund(charged)

        await self._send(event, error.user_message())
        return InvocationResult(
            InvocationState.FAILED,
            command=command.name,
            level=level,
            charged=charged,
            refunded=refunded,
            error=error,
        )

    async def _reject(
        self,
        event: MessageEvent,
        error: BotError,
        command: Optional[Command] = None,
        level: Optional[PermissionLevel] = None,
    ) -> InvocationResult:
        self.logger.info(f"Rejected for {event.author_id}: {error}")
        await self._send(event, error.user_message())
        return InvocationResult(
            InvocationState.REJECTED,
            command=command.name if command else None,
            level=level,
            error=error,
        )

    async def _send(self, event: MessageEvent, content: str) -> None:
        try:
            await self.platform.send_message(event.channel, content)
        except Exception as e:
            self.logger.warning(f"Could not report to channel: {e}")

    async def _load_settings(self, guild_id: Optional[str]) -> Optional[GuildSettings]:
        if not guild_id:
            return None
        if self.settings_store is None:
            return GuildSettings(guild_id=str(guild_id))
        try:
            return await self.settings_store.get(str(guild_id))
        except Exception as e:
            self.logger.error(f"Failed to load settings for guild {guild_id}: {e}")
            return GuildSettings(guild_id=str(guild_id))

    def effective_cost(
        self,
        command: Command,
        level: PermissionLevel,
        settings: Optional[GuildSettings] = None,
    ) -> int:
        """Command cost for ``level``, with the guild's fixed override applied."""
        if settings is not None and command.name in settings.cost_overrides:
            return max(0, int(settings.cost_overrides[command.name]))
        return self.ledger.resolve_cost(command, level)

    @staticmethod
    def parse_command(content: str, prefix: str) -> Optional[Tuple[str, List[str]]]:
        """
        Parse command name and arguments from message.

        Args:
            content: Message content
            prefix: Command prefix

        Returns:
            Tuple of (command_name, args), or None if this is not a command
        """
        content = (content or "").strip()
        if not prefix or not content.startswith(prefix):
            return None

        parts = content[len(prefix):].split()
        if not parts:
            return None

        return parts[0].lower(), parts[1:]
