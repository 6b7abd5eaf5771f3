"""
Logging utilities for the guild bot.
Uses Rich for colored console output.
"""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# All bot loggers live under this namespace and share one handler
ROOT_LOGGER = "guild_bot"

CUSTOM_THEME = Theme({
    "logging.level.debug": "dim cyan",
    "logging.level.warning": "yellow",
    "logging.level.error": "bold red",
})

console = Console(theme=CUSTOM_THEME)


def _default_level() -> int:
    return logging.DEBUG if os.getenv("DEBUG", "false").lower() == "true" else logging.INFO


def setup_logging(level: Optional[int] = None) -> logging.Logger:
    """
    Attach a RichHandler to the bot's root logger.

    Calling it again replaces the handler, so the level can be changed
    after the configuration is loaded.

    Args:
        level: Logging level (default: INFO, DEBUG when DEBUG=true)

    Returns:
        The root bot logger
    """
    root = logging.getLogger(ROOT_LOGGER)

    if level is None:
        level = _default_level()

    root.setLevel(level)
    root.handlers = []

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        log_time_format="%H:%M:%S",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt="[%(component)s] %(message)s"))
    handler.addFilter(_component_filter)

    root.addHandler(handler)
    root.propagate = False

    return root


def _component_filter(record: logging.LogRecord) -> bool:
    # "guild_bot.Economy" -> "Economy"
    record.component = record.name.rsplit(".", 1)[-1]
    return True


def get_logger(name: str) -> logging.Logger:
    """Get a component logger, configuring the root handler on first use."""
    if not logging.getLogger(ROOT_LOGGER).handlers:
        setup_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class LoggerMixin:
    """Mixin class that provides logger functionality."""

    def __init__(self, name: str):
        self._logger = get_logger(name)

    @property
    def logger(self) -> logging.Logger:
        """Get the logger instance."""
        return self._logger

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(message, extra=kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._logger.error(message, extra=kwargs)

    def success(self, message: str, **kwargs) -> None:
        """Log success message (custom level)."""
        # Use info level but prefix with [SUCCESS]
        self._logger.info(f"[SUCCESS] {message}", extra=kwargs)
