"""Reports the caller's permission level."""

from typing import Any, List

COMMAND = {
    "name": "mylevel",
    "description": "Tells you your permission level for the current message location.",
    "category": "System",
    "usage": "mylevel",
    "aliases": ["level"],
}


async def run(ctx: Any, args: List[str], level: Any) -> None:
    await ctx.reply(f"Your permission level is: {int(level)} - {level!s}")
