"""
Wanted Command
Posts a wanted poster of a user
"""

import re
from typing import Any, List

from commands.context import MemberInfo
from utils.validation import ValidationUtils

COMMAND = {
    "name": "wanted",
    "description": "Post a wanted picture of a user.",
    "category": "Fun",
    "usage": "wanted [@mention|user id]",
    "extended": "Mention another user to post a wanted poster of them.",
    "cost": 5,
    "bot_perms": ["SEND_MESSAGES", "ATTACH_FILES"],
}

ANIMATED_AVATAR = re.compile(r"\.gif.*$")


def static_avatar(url: str) -> str:
    """Animated avatars are posted as their first frame."""
    return ANIMATED_AVATAR.sub(".png", url)


async def find_target(ctx: Any, args: List[str]) -> MemberInfo:
    """
    Resolve the poster's subject: the caller, or the mentioned user.

    Raises:
        LookupError: The mention or ID does not match a member
    """
    if not args:
        member = await ctx.platform.get_member(ctx.guild_id, ctx.author_id)
    else:
        validation = ValidationUtils.validate_user_id(args[0])
        if not validation:
            raise LookupError(validation.error)
        member = await ctx.platform.get_member(ctx.guild_id, validation.sanitized)

    if member is None or not member.avatar_url:
        raise LookupError(f"Could not find user `{args[0] if args else ctx.author_id}`")
    return member


async def run(ctx: Any, args: List[str], level: Any) -> None:
    target = await find_target(ctx, args)

    if ctx.images is None:
        raise RuntimeError("Image service is not configured")

    placeholder = await ctx.send("Fetching the Sheriff...")

    poster = await ctx.images.wanted_poster(static_avatar(target.avatar_url))
    posted = await ctx.send(file=poster, filename="wanted.jpg")
    if posted is None:
        if placeholder is not None:
            await ctx.platform.delete_message(placeholder)
        raise RuntimeError("Could not post the poster")

    # The poster is out; a failed cleanup below must not refund the caller
    ctx.mark_partial_success()

    if placeholder is not None:
        await ctx.platform.delete_message(placeholder)
