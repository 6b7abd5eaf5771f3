"""
Entry point for the guild bot.
"""

import asyncio
import logging
import sys

from bot.client import run_bot
from bot.config import config
from utils.logger import get_logger, setup_logging

logger = get_logger("Main")


def main():
    """Main entry point."""
    setup_logging(logging.DEBUG if config.DEBUG else logging.INFO)

    try:
        logger.info("Starting Guild Bot...")
        asyncio.run(run_bot())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
