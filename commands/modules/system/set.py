"""
Set Command
View or change the guild's bot settings
"""

from typing import Any, List

from commands.errors import SettingsValidationError
from repositories.settings_repository import apply_setting

COMMAND = {
    "name": "set",
    "description": "View or change settings for your server.",
    "category": "System",
    "usage": "set <view/edit/del/reset> <key> <value>",
    "extended": (
        "Keys: prefix, admin_role, mod_role, cost.<command>, level.<command>.\n"
        "`del` restores one key to its default, `reset` restores all of them."
    ),
    "aliases": ["setting", "settings", "conf"],
    "perm_level": "Administrator",
    "guild_only": True,
}


def format_settings(settings: Any) -> str:
    lines = ["⚙️ **Server Settings**", ""]
    for key, value in settings.to_dict().items():
        if isinstance(value, dict):
            value = ", ".join(f"{k}={v}" for k, v in sorted(value.items())) or "-"
        lines.append(f"**{key}:** {value if value is not None else '-'}")
    return "\n".join(lines)


async def run(ctx: Any, args: List[str], level: Any) -> None:
    store = ctx.settings_store
    action = args[0].lower() if args else "view"
    settings = ctx.settings or await store.get(ctx.guild_id)

    if action == "view":
        await ctx.send(format_settings(settings))
        return

    if action == "reset":
        await store.reset(ctx.guild_id)
        await ctx.reply("All settings restored to their defaults.")
        return

    if action not in ("edit", "del") or len(args) < 2:
        await ctx.reply(f"Usage: `{ctx.prefix}{COMMAND['usage']}`")
        return

    key = args[1]
    value = " ".join(args[2:]) if action == "edit" else None
    if action == "edit" and not value:
        await ctx.reply("Please specify a new value.")
        return

    known = [command.name for command in ctx.registry.list_commands()]
    try:
        updated = apply_setting(settings, key, value, known_commands=known)
    except SettingsValidationError as e:
        await ctx.reply(e.user_message())
        return

    if not await store.save(updated):
        raise RuntimeError("Settings could not be saved")

    if value is None:
        await ctx.reply(f"`{key}` restored to its default.")
    else:
        await ctx.reply(f"`{key}` successfully edited to `{value}`.")
