"""
Balance Command
Shows a user's credit balance
"""

from typing import Any, List

from utils.validation import ValidationUtils

COMMAND = {
    "name": "balance",
    "description": "Show your credits, or another user's.",
    "category": "Economy",
    "usage": "balance [@mention|user id]",
    "aliases": ["bal", "credits"],
}


async def run(ctx: Any, args: List[str], level: Any) -> None:
    user_id = ctx.author_id
    if args:
        validation = ValidationUtils.validate_user_id(args[0])
        if not validation:
            await ctx.reply(f"❌ {validation.error}")
            return
        user_id = validation.sanitized

    balance = await ctx.ledger.get_balance(user_id)
    if user_id == ctx.author_id:
        await ctx.reply(f"You have **{balance}** credits.")
    else:
        await ctx.reply(f"<@{user_id}> has **{balance}** credits.")
