"""
Utility modules for the guild bot.
"""

from .logger import LoggerMixin, get_logger, setup_logging
from .discord import DiscordUtils
from .validation import ValidationUtils, ValidationResult
from .monitoring import Monitoring
from .error_handler import ErrorHandler, get_error_handler, setup_error_handler

__all__ = [
    "LoggerMixin",
    "get_logger",
    "setup_logging",
    "DiscordUtils",
    "ValidationUtils",
    "ValidationResult",
    "Monitoring",
    "ErrorHandler",
    "get_error_handler",
    "setup_error_handler",
]
