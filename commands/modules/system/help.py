"""
Help Command
Shows the commands available at the caller's level
"""

from typing import Any, List

COMMAND = {
    "name": "help",
    "description": "Displays all the available commands for your permission level.",
    "category": "System",
    "usage": "help [command]",
    "aliases": ["h", "halp"],
}


async def run(ctx: Any, args: List[str], level: Any) -> None:
    if args:
        command = ctx.registry.get(args[0])
        if command is None or command.min_level > level:
            await ctx.send(f"❌ Unknown command: `{args[0]}`")
            return
        await ctx.send(ctx.registry.generate_command_help(command.name, ctx.prefix))
        return

    await ctx.send(ctx.registry.generate_help(level, ctx.prefix))
