"""
Validation Utilities
Helper functions for validating Discord IDs, mentions and settings input
"""

import re
from typing import Any, Iterable, Optional, Union

# Discord snowflake ID pattern: 17-20 digits
SNOWFLAKE_REGEX = re.compile(r"^[0-9]{17,20}$")

# <@123>, <@!123>
USER_MENTION_REGEX = re.compile(r"^<@!?([0-9]{17,20})>$")

# <@&123>
ROLE_MENTION_REGEX = re.compile(r"^<@&([0-9]{17,20})>$")

PREFIX_MAX_LENGTH = 5

# Settings keys that take a single value
SCALAR_SETTINGS = ("prefix", "admin_role", "mod_role")

# Settings keys that take a command name suffix, e.g. "cost.wanted"
COMMAND_SETTINGS = {
    "cost": "cost_overrides",
    "level": "level_overrides",
}

LEVEL_NAMES = ("user", "trusted", "moderator", "administrator", "bot admin", "bot_admin", "owner")


class ValidationResult:
    """Result of a validation operation."""

    def __init__(
        self,
        valid: bool,
        error: Optional[str] = None,
        sanitized: Optional[Any] = None,
        value: Optional[Any] = None,
    ):
        self.valid = valid
        self.error = error
        self.sanitized = sanitized
        self.value = value

    def __bool__(self) -> bool:
        return self.valid


class ValidationUtils:
    """Utility class for input validation."""

    @staticmethod
    def is_valid_snowflake(id_value: Union[str, int]) -> bool:
        """
        Check if value is a valid Discord snowflake ID.

        Args:
            id_value: ID to validate

        Returns:
            True if valid snowflake
        """
        if not isinstance(id_value, (str, int)) or isinstance(id_value, bool):
            return False
        return bool(SNOWFLAKE_REGEX.match(str(id_value)))

    @staticmethod
    def validate_user_id(user_id: Optional[Union[str, int]]) -> ValidationResult:
        """
        Validate a user ID or user mention.

        Args:
            user_id: Raw ID or ``<@id>`` mention

        Returns:
            ValidationResult with the bare ID as ``sanitized``
        """
        if not user_id:
            return ValidationResult(valid=False, error="User ID is required")

        sanitized = ValidationUtils.sanitize_input(str(user_id))
        match = USER_MENTION_REGEX.match(sanitized)
        if match:
            sanitized = match.group(1)

        if not ValidationUtils.is_valid_snowflake(sanitized):
            return ValidationResult(valid=False, error="Invalid user ID format")

        return ValidationResult(valid=True, sanitized=sanitized)

    @staticmethod
    def validate_role_id(role_id: Optional[Union[str, int]]) -> ValidationResult:
        """Validate a role ID or ``<@&id>`` mention."""
        if not role_id:
            return ValidationResult(valid=False, error="Role ID is required")

        sanitized = ValidationUtils.sanitize_input(str(role_id))
        match = ROLE_MENTION_REGEX.match(sanitized)
        if match:
            sanitized = match.group(1)

        if not ValidationUtils.is_valid_snowflake(sanitized):
            return ValidationResult(valid=False, error="Invalid role ID format")

        return ValidationResult(valid=True, sanitized=sanitized)

    @staticmethod
    def sanitize_input(input_value: str) -> str:
        """
        Sanitize user input to prevent injection.

        Args:
            input_value: Input to sanitize

        Returns:
            Sanitized input string
        """
        if not isinstance(input_value, str):
            return ""

        # Trim whitespace
        sanitized = input_value.strip()

        # Remove zero-width characters
        sanitized = re.sub(r"[\u200B-\u200D\uFEFF]", "", sanitized)

        # Remove control characters
        sanitized = re.sub(r"[\x00-\x1F\x7F-\x9F]", "", sanitized)

        return sanitized

    @staticmethod
    def validate_setting(
        key: str,
        value: Optional[str],
        known_commands: Optional[Iterable[str]] = None,
    ) -> ValidationResult:
        """
        Validate one guild settings update.

        Args:
            key: Setting key, e.g. ``prefix`` or ``cost.wanted``
            value: Raw value, or None to reset the key
            known_commands: Command names accepted in ``cost.*``/``level.*`` keys

        Returns:
            ValidationResult with ``value=(field_name, command_or_None)`` and
            the converted value as ``sanitized``
        """
        key = ValidationUtils.sanitize_input(key or "").lower()

        if key in SCALAR_SETTINGS:
            target = (key, None)
        elif "." in key and key.split(".", 1)[0] in COMMAND_SETTINGS:
            group, command = key.split(".", 1)
            if not command:
                return ValidationResult(valid=False, error="Missing command name")
            if known_commands is not None and command not in set(known_commands):
                return ValidationResult(valid=False, error=f"Unknown command `{command}`")
            target = (COMMAND_SETTINGS[group], command)
        else:
            allowed = ", ".join(list(SCALAR_SETTINGS) + [f"{g}.<command>" for g in COMMAND_SETTINGS])
            return ValidationResult(valid=False, error=f"Unknown key. Valid: {allowed}")

        if value is None:
            return ValidationResult(valid=True, sanitized=None, value=target)

        value = ValidationUtils.sanitize_input(value)
        field_name = target[0]

        if field_name == "prefix":
            if not value or len(value) > PREFIX_MAX_LENGTH or " " in value:
                return ValidationResult(
                    valid=False,
                    error=f"Prefix must be 1-{PREFIX_MAX_LENGTH} characters without spaces"
                )
            return ValidationResult(valid=True, sanitized=value, value=target)

        if field_name in ("admin_role", "mod_role"):
            role = ValidationUtils.validate_role_id(value)
            if not role:
                return role
            return ValidationResult(valid=True, sanitized=role.sanitized, value=target)

        if field_name == "cost_overrides":
            if not value.isdigit():
                return ValidationResult(valid=False, error="Cost must be a non-negative whole number")
            return ValidationResult(valid=True, sanitized=int(value), value=target)

        # level_overrides
        if value.lower() not in LEVEL_NAMES:
            return ValidationResult(valid=False, error="Unknown permission level")
        return ValidationResult(valid=True, sanitized=value.lower(), value=target)
