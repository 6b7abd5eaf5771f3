from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from commands.command_handler import CommandHandler
from commands.command_registry import Command, CommandDefinition, CommandRegistry
from commands.context import MemberInfo, MessageEvent
from commands.module_loader import ModuleLoader
from commands.permissions import Caller, Capability, PermissionResolver
from managers.economy_manager import EconomyLedger
from repositories.balance_repository import MemoryBalanceStore
from repositories.settings_repository import MemorySettingsStore
from utils.monitoring import Monitoring

OWNER_ID = "100000000000000001"
BOT_ADMIN_ID = "100000000000000002"
TRUSTED_ID = "100000000000000003"
USER_ID = "100000000000000010"
OTHER_USER_ID = "100000000000000011"
GUILD_ID = "200000000000000001"
ADMIN_ROLE = "300000000000000001"
MOD_ROLE = "300000000000000002"

MODULES_DIR = Path(__file__).resolve().parent.parent / "commands" / "modules"


@dataclass
class SentMessage:
    channel: Any
    content: Optional[str]
    file: Optional[bytes] = None
    filename: Optional[str] = None


class FakePlatform:
    """Records everything the framework asks of the chat platform."""

    def __init__(self):
        self.sent = []
        self.deleted = []
        self.members: Dict[str, MemberInfo] = {}
        self.capabilities = set(Capability)
        self.guild_admins = set()
        self.roles: Dict[str, set] = {}

    def add_member(self, user_id: str, name: str = "someone") -> MemberInfo:
        member = MemberInfo(user_id, name, f"https://cdn.example/avatars/{user_id}.gif?size=128")
        self.members[user_id] = member
        return member

    async def send_message(self, channel, content=None, file=None, filename=None):
        message = SentMessage(channel, content, file, filename)
        self.sent.append(message)
        return message

    async def delete_message(self, message):
        self.deleted.append(message)
        return True

    async def get_member(self, guild_id, user_ref):
        return self.members.get(str(user_ref))

    async def bot_has_capability(self, guild_id, channel, capability):
        return capability in self.capabilities

    async def caller_profile(self, guild_id, user_id):
        if not guild_id:
            return Caller(user_id=user_id)
        return Caller(
            user_id=user_id,
            is_guild_admin=user_id in self.guild_admins,
            role_ids=frozenset(self.roles.get(user_id, ())),
        )

    def contents(self):
        return [m.content for m in self.sent if m.content is not None]


class FakeImages:
    def __init__(self):
        self.requested = []

    async def wanted_poster(self, avatar_url: str) -> bytes:
        self.requested.append(avatar_url)
        return b"JPEG" + avatar_url.encode()


def make_command(name: str, run, **config) -> Command:
    """Build a command without going through a module file."""
    return Command(CommandDefinition.from_config({"name": name, **config}), run)


def make_event(content: str, author_id: str = USER_ID, guild_id: Optional[str] = GUILD_ID) -> MessageEvent:
    return MessageEvent(author_id=author_id, content=content, channel="general", guild_id=guild_id)


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def registry() -> CommandRegistry:
    return CommandRegistry()


@pytest.fixture
def loader(registry) -> ModuleLoader:
    return ModuleLoader(registry)


@pytest.fixture
def balance_store() -> MemoryBalanceStore:
    return MemoryBalanceStore()


@pytest.fixture
def settings_store() -> MemorySettingsStore:
    return MemorySettingsStore({GUILD_ID: {"admin_role": ADMIN_ROLE, "mod_role": MOD_ROLE}})


@pytest.fixture
def ledger(balance_store) -> EconomyLedger:
    return EconomyLedger(balance_store, starting_balance=100)


@pytest.fixture
def resolver() -> PermissionResolver:
    return PermissionResolver(owner_id=OWNER_ID, bot_admins=[BOT_ADMIN_ID], trusted_users=[TRUSTED_ID])


@pytest.fixture
def images() -> FakeImages:
    return FakeImages()


@pytest.fixture
def monitoring() -> Monitoring:
    return Monitoring()


@pytest.fixture
def handler(platform, registry, loader, ledger, resolver, settings_store, images, monitoring) -> CommandHandler:
    return CommandHandler(
        platform,
        registry,
        ledger,
        resolver,
        settings_store=settings_store,
        default_prefix="~",
        services={"loader": loader, "images": images},
        monitoring=monitoring,
    )
