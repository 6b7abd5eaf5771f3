"""
Error Handler
Global error handling and reporting
"""

import asyncio
import traceback
from typing import Any, Dict, Optional

from commands.errors import BotError
from utils.logger import get_logger


class ErrorHandler:
    """Global error handler for the bot."""

    def __init__(self):
        self.logger = get_logger("ErrorHandler")
        self.error_counts: Dict[str, int] = {}

    def initialize(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Route exceptions from stray tasks through this handler."""
        if loop is None:
            loop = asyncio.get_running_loop()

        loop.set_exception_handler(self._async_exception_handler)
        self.logger.info("Error handlers initialized")

    def _async_exception_handler(self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        """Handle async exceptions."""
        exception = context.get("exception")
        if exception:
            self.handle_exception(exception, "async")
        else:
            message = context.get("message", "Unknown async error")
            self.logger.error(f"Async error: {message}")

    def handle_exception(self, error: BaseException, context: str = "") -> int:
        """
        Log an exception and count it.

        Framework errors are expected outcomes and log at warning level
        without a traceback. Anything else logs at error level, with the
        traceback at debug level.

        Args:
            error: The exception that occurred
            context: Optional context string, e.g. the command name

        Returns:
            Number of errors seen for this context and error type
        """
        error_key = f"{context}:{type(error).__name__}"
        prefix = f"[{context}] " if context else ""

        if isinstance(error, BotError) and not error.__cause__:
            self.logger.warning(f"{prefix}{error}")
        else:
            self.logger.error(f"{prefix}{error}")
            cause = error.__cause__ or error
            trace = "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))
            self.logger.debug(f"Traceback:\n{trace}")

        count = self.error_counts.get(error_key, 0) + 1
        self.error_counts[error_key] = count
        return count

    def reset(self) -> None:
        self.error_counts.clear()


# Global error handler instance
_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    global _error_handler
    if _error_handler is None:
        _error_handler = ErrorHandler()
    return _error_handler


def setup_error_handler(loop: Optional[asyncio.AbstractEventLoop] = None) -> ErrorHandler:
    """Set up the global error handler."""
    handler = get_error_handler()
    handler.initialize(loop)
    return handler
