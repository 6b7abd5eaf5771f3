"""
Configuration management for the guild bot.
Loads environment variables and provides configuration settings.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DEFAULT_COMMANDS_DIR = str(Path(__file__).parent.parent / "commands" / "modules")


def _id_list(raw: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Config:
    """Bot configuration settings."""

    # Discord
    DISCORD_TOKEN: str

    # Database
    DATABASE_URL: str = ""

    # Web Server (status / keep-alive)
    PORT: int = 11186
    HOST: str = "0.0.0.0"

    # Debug
    DEBUG: bool = False

    # Commands
    DEFAULT_PREFIX: str = "~"
    COMMANDS_DIR: str = DEFAULT_COMMANDS_DIR
    REPORT_UNKNOWN_COMMANDS: bool = False

    # Permission sources
    OWNER_ID: str = ""
    BOT_ADMINS: Tuple[str, ...] = field(default_factory=tuple)
    TRUSTED_USERS: Tuple[str, ...] = field(default_factory=tuple)

    # Economy
    STARTING_BALANCE: int = 100

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            DISCORD_TOKEN=os.getenv("DISCORD_TOKEN", ""),
            DATABASE_URL=os.getenv("DATABASE_URL", ""),
            PORT=int(os.getenv("PORT", "11186")),
            HOST=os.getenv("HOST", "0.0.0.0"),
            DEBUG=os.getenv("DEBUG", "false").lower() == "true",
            DEFAULT_PREFIX=os.getenv("DEFAULT_PREFIX", "~"),
            COMMANDS_DIR=os.getenv("COMMANDS_DIR", DEFAULT_COMMANDS_DIR),
            REPORT_UNKNOWN_COMMANDS=os.getenv("REPORT_UNKNOWN_COMMANDS", "false").lower() == "true",
            OWNER_ID=os.getenv("OWNER_ID", ""),
            BOT_ADMINS=_id_list(os.getenv("BOT_ADMINS", "")),
            TRUSTED_USERS=_id_list(os.getenv("TRUSTED_USERS", "")),
            STARTING_BALANCE=int(os.getenv("STARTING_BALANCE", "100")),
        )

    def validate(self) -> None:
        """Validate required configuration."""
        if not self.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        if self.STARTING_BALANCE < 0:
            raise ValueError("STARTING_BALANCE cannot be negative")
        if not self.DEFAULT_PREFIX or " " in self.DEFAULT_PREFIX:
            raise ValueError("DEFAULT_PREFIX must be non-empty and contain no spaces")


# Global config instance
config = Config.from_env()
