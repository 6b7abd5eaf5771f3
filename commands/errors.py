"""
Command Errors
Error taxonomy for the command framework
"""

from typing import Any, Optional


class BotError(Exception):
    """Base class for all command framework errors."""

    def user_message(self) -> str:
        """Human-readable text for the reply channel."""
        return f"❌ {self}"


class DuplicateNameError(BotError):
    """A command with the same name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"Command name already registered: {name}")
        self.name = name


class DuplicateAliasError(BotError):
    """An alias collides with an existing name or alias."""

    def __init__(self, alias: str, owner: str):
        super().__init__(f"Alias `{alias}` is already used by `{owner}`")
        self.alias = alias
        self.owner = owner


class NotFoundError(BotError):
    """No command is registered under the given name or alias."""

    def __init__(self, name: str):
        super().__init__(f"Unknown command: `{name}`")
        self.name = name


class LoadError(BotError):
    """A command module could not be loaded or unloaded."""

    def __init__(self, detail: str, location: Optional[str] = None):
        message = f"{detail} ({location})" if location else detail
        super().__init__(message)
        self.detail = detail
        self.location = location


class InsufficientFundsError(BotError):
    """The caller cannot pay for the command."""

    def __init__(self, user_id: str, amount: int, balance: int):
        super().__init__(f"Insufficient funds for {user_id}: needs {amount}, has {balance}")
        self.user_id = user_id
        self.amount = amount
        self.balance = balance

    def user_message(self) -> str:
        return f"💸 This costs **{self.amount}** credits, you only have **{self.balance}**."


class PermissionDeniedError(BotError):
    """The caller's permission level is below the command's requirement."""

    def __init__(self, command: str, level: Any, required: Any):
        super().__init__(f"`{command}` requires {required!s}, caller is {level!s}")
        self.command = command
        self.level = level
        self.required = required

    def user_message(self) -> str:
        return (
            f"⛔ You do not have permission to use `{self.command}`. "
            f"Your level: **{self.level!s}**, required: **{self.required!s}**."
        )


class MissingBotCapabilityError(BotError):
    """The bot lacks a platform capability the command needs."""

    def __init__(self, command: str, missing: Any):
        names = ", ".join(sorted(str(flag) for flag in missing))
        super().__init__(f"`{command}` needs bot permissions: {names}")
        self.command = command
        self.missing = missing

    def user_message(self) -> str:
        return f"⚠️ I need these permissions to run that: {', '.join(sorted(str(m) for m in self.missing))}"


class CommandExecutionError(BotError):
    """A command body raised while executing."""

    def __init__(self, command: str, cause: BaseException):
        super().__init__(f"Command `{command}` failed: {cause}")
        self.command = command
        self.cause = cause

    def user_message(self) -> str:
        return f"❌ `{self.command}` failed: {self.cause}"


class SettingsValidationError(BotError):
    """A guild settings update was rejected."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Invalid setting `{key}`: {reason}")
        self.key = key
        self.reason = reason
