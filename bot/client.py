"""
Discord client setup using discord.py.
"""

import asyncio
import signal
from typing import Any, Optional

import discord

from bot.config import Config, config
from bot.database import close_database, init_database
from bot.keep_alive import register_services, run_server, update_bot_status
from bot.platform import DiscordPlatform
from commands.command_handler import CommandHandler
from commands.command_registry import CommandRegistry
from commands.context import ImageService
from commands.module_loader import ModuleLoader
from commands.permissions import PermissionResolver
from managers.economy_manager import EconomyLedger
from repositories.balance_repository import BalanceRepository, MemoryBalanceStore
from repositories.settings_repository import MemorySettingsStore, SettingsRepository
from utils.error_handler import setup_error_handler
from utils.logger import get_logger
from utils.monitoring import Monitoring

logger = get_logger("Client")


class GuildBot(discord.Client):
    """Discord client that feeds messages to the command handler."""

    def __init__(self, settings: Config = config, images: Optional[ImageService] = None):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        super().__init__(intents=intents)

        self.config = settings
        self.images = images
        self.platform = DiscordPlatform(self)
        self.monitoring = Monitoring()

        # Built in setup_hook
        self.registry: Optional[CommandRegistry] = None
        self.loader: Optional[ModuleLoader] = None
        self.ledger: Optional[EconomyLedger] = None
        self.handler: Optional[CommandHandler] = None

    async def setup_hook(self):
        """Called when bot is starting up."""
        logger.info("Setting up bot...")
        setup_error_handler()

        pool = await init_database(self.config.DATABASE_URL)
        if pool is not None:
            balance_store: Any = BalanceRepository(pool)
            settings_store: Any = SettingsRepository(pool)
        else:
            balance_store = MemoryBalanceStore()
            settings_store = MemorySettingsStore()

        self.registry = CommandRegistry()
        self.loader = ModuleLoader(self.registry)
        self.loader.load_all(self.config.COMMANDS_DIR)

        self.ledger = EconomyLedger(balance_store, starting_balance=self.config.STARTING_BALANCE)
        resolver = PermissionResolver(
            owner_id=self.config.OWNER_ID,
            bot_admins=self.config.BOT_ADMINS,
            trusted_users=self.config.TRUSTED_USERS,
        )

        self.handler = CommandHandler(
            self.platform,
            self.registry,
            self.ledger,
            resolver,
            settings_store=settings_store,
            default_prefix=self.config.DEFAULT_PREFIX,
            report_unknown=self.config.REPORT_UNKNOWN_COMMANDS,
            services={"loader": self.loader, "images": self.images},
            monitoring=self.monitoring,
        )

        register_services(registry=self.registry, ledger=self.ledger, monitoring=self.monitoring)
        logger.info("Bot setup complete")

    async def on_ready(self):
        """Called when bot is ready."""
        update_bot_status(status="ready", discord_connected=True)
        logger.info(f"Logged in as: {self.user}")
        logger.info(f"Use {self.config.DEFAULT_PREFIX}help to see available commands")

    async def on_message(self, message: discord.Message):
        """Handle incoming messages."""
        if message.author.bot or self.handler is None:
            return

        await self.handler.handle(DiscordPlatform.to_event(message))

    async def close(self):
        """Clean shutdown."""
        logger.info("Shutting down bot...")

        await close_database()

        update_bot_status(status="offline", discord_connected=False)
        await super().close()


# Global bot instance
bot: Optional[GuildBot] = None


def create_bot(settings: Config = config, images: Optional[ImageService] = None) -> GuildBot:
    """Create and return bot instance."""
    global bot
    bot = GuildBot(settings, images=images)
    return bot


async def run_bot(settings: Config = config, images: Optional[ImageService] = None):
    """Run the bot."""
    settings.validate()

    client = create_bot(settings, images=images)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, lambda s=sig: asyncio.create_task(_shutdown(client, s)))
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    try:
        run_server()
        await client.start(settings.DISCORD_TOKEN)
    except Exception as e:
        logger.error(f"Bot error: {e}")
        raise


async def _shutdown(client: GuildBot, sig: signal.Signals) -> None:
    logger.info(f"Received {sig.name}, shutting down...")
    await client.close()
