import pytest

from commands.context import GuildSettings
from commands.errors import SettingsValidationError
from repositories.settings_repository import MemorySettingsStore, apply_setting
from utils.validation import ValidationUtils

from conftest import GUILD_ID, MOD_ROLE, USER_ID


@pytest.mark.parametrize("raw", [USER_ID, f"<@{USER_ID}>", f"<@!{USER_ID}>", f" {USER_ID}\u200b "])
def test_user_id_forms(raw) -> None:
    result = ValidationUtils.validate_user_id(raw)
    assert result
    assert result.sanitized == USER_ID


@pytest.mark.parametrize("raw", [None, "", "bob", "1234", f"<@&{USER_ID}>", True])
def test_invalid_user_ids(raw) -> None:
    assert not ValidationUtils.validate_user_id(raw)


def test_role_mention() -> None:
    assert ValidationUtils.validate_role_id(f"<@&{MOD_ROLE}>").sanitized == MOD_ROLE
    assert not ValidationUtils.validate_role_id(f"<@{MOD_ROLE}>")


def test_sanitize_strips_control_characters() -> None:
    assert ValidationUtils.sanitize_input("  he\x00llo\u200d ") == "hello"
    assert ValidationUtils.sanitize_input(42) == ""


def test_apply_scalar_settings() -> None:
    settings = GuildSettings(guild_id=GUILD_ID)

    updated = apply_setting(settings, "PREFIX", "$")
    updated = apply_setting(updated, "mod_role", f"<@&{MOD_ROLE}>")

    assert updated.prefix == "$"
    assert updated.mod_role == MOD_ROLE
    assert settings.prefix is None


def test_apply_command_settings() -> None:
    settings = GuildSettings(guild_id=GUILD_ID)

    updated = apply_setting(settings, "cost.wanted", "0", known_commands=["wanted"])
    updated = apply_setting(updated, "level.wanted", "Bot Admin", known_commands=["wanted"])

    assert updated.cost_overrides == {"wanted": 0}
    assert updated.level_overrides == {"wanted": "bot admin"}

    cleared = apply_setting(updated, "cost.wanted", None, known_commands=["wanted"])
    assert cleared.cost_overrides == {}
    assert updated.cost_overrides == {"wanted": 0}


def test_reset_scalar_setting() -> None:
    settings = GuildSettings(guild_id=GUILD_ID, prefix="!")
    assert apply_setting(settings, "prefix", None).prefix is None


@pytest.mark.parametrize("key, value", [
    ("prefix", "a b"),
    ("prefix", "      "),
    ("cost.wanted", "-3"),
    ("cost.", "3"),
    ("level.wanted", "king"),
    ("admin_role", "@admins"),
    ("welcome", "hi"),
])
def test_apply_rejects_invalid(key, value) -> None:
    with pytest.raises(SettingsValidationError):
        apply_setting(GuildSettings(guild_id=GUILD_ID), key, value, known_commands=["wanted"])


def test_settings_round_trip_through_dict() -> None:
    settings = GuildSettings(
        guild_id=GUILD_ID,
        prefix="!",
        mod_role=MOD_ROLE,
        cost_overrides={"wanted": 2},
        level_overrides={"wanted": "moderator"},
    )

    assert GuildSettings.from_dict(GUILD_ID, settings.to_dict()) == settings


@pytest.mark.asyncio
async def test_memory_settings_store_defaults_and_reset() -> None:
    store = MemorySettingsStore()

    assert await store.get(GUILD_ID) == GuildSettings(guild_id=GUILD_ID)
    assert await store.save(GuildSettings(guild_id=GUILD_ID, prefix="?"))
    assert (await store.get(GUILD_ID)).prefix == "?"
    assert await store.reset(GUILD_ID)
    assert not await store.reset(GUILD_ID)
