"""
Reload Command
Unloads a command module and loads it again from disk
"""

from typing import Any, List

from commands.errors import LoadError, NotFoundError

COMMAND = {
    "name": "reload",
    "description": "Reloads a command that has been modified.",
    "category": "System",
    "usage": "reload [command]",
    "extended": (
        "This command is designed to unload, then reload the command from the "
        "command & aliases collections for the changes to take effect."
    ),
    "bot_perms": ["SEND_MESSAGES"],
    "perm_level": "Bot Admin",
}


async def run(ctx: Any, args: List[str], level: Any) -> None:
    if not args:
        await ctx.reply("Must provide a command to reload. Derp.")
        return

    name = args[0].lower()

    try:
        command = await ctx.loader.reload(name)
    except NotFoundError:
        await ctx.reply(f"There is no command named `{name}`.")
        return
    except LoadError as e:
        await ctx.reply(f"Error reloading `{name}`: {e}")
        return

    await ctx.reply(f"The command `{command.name}` has been reloaded")
