"""
Stats Command
Shows process health and dispatcher counters
"""

from typing import Any, List

COMMAND = {
    "name": "stats",
    "description": "Show bot health status and metrics.",
    "category": "System",
    "usage": "stats",
    "aliases": ["status"],
    "perm_level": "Moderator",
}


async def run(ctx: Any, args: List[str], level: Any) -> None:
    monitoring = ctx.services.get("monitoring")
    if monitoring is None:
        await ctx.send("❌ Monitoring not available")
        return
    await ctx.send(monitoring.format_status())
