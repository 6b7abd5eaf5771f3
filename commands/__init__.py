"""
Command framework for the guild bot.
"""

from .errors import (
    BotError,
    CommandExecutionError,
    DuplicateAliasError,
    DuplicateNameError,
    InsufficientFundsError,
    LoadError,
    MissingBotCapabilityError,
    NotFoundError,
    PermissionDeniedError,
    SettingsValidationError,
)
from .context import CommandContext, GuildSettings, MemberInfo, MessageEvent
from .permissions import Caller, Capability, PermissionLevel, PermissionResolver
from .command_registry import Command, CommandDefinition, CommandRegistry, Cost
from .module_loader import ModuleLoader

__all__ = [
    "BotError",
    "CommandExecutionError",
    "DuplicateAliasError",
    "DuplicateNameError",
    "InsufficientFundsError",
    "LoadError",
    "MissingBotCapabilityError",
    "NotFoundError",
    "PermissionDeniedError",
    "SettingsValidationError",
    "CommandContext",
    "GuildSettings",
    "MemberInfo",
    "MessageEvent",
    "Caller",
    "Capability",
    "PermissionLevel",
    "PermissionResolver",
    "Command",
    "CommandDefinition",
    "CommandRegistry",
    "Cost",
    "ModuleLoader",
]
