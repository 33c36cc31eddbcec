"""Embed rendering for resolved messages."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from .logging import get_logger

if TYPE_CHECKING:
    from .client import UnfurlBotClient

logger = get_logger(__name__)

EMBED_COLOUR = discord.Colour(0x6FC6E2)
ATTACHMENTS_FIELD_NAME = "Attachments"
MAX_DESCRIPTION_LENGTH = 4096
ELLIPSIS = "\N{HORIZONTAL ELLIPSIS}"


def find_first_image(message: discord.Message) -> str | None:
    """URL of the first attachment with an ``image/*`` content type."""
    for attachment in message.attachments:
        if (attachment.content_type or "").startswith("image/"):
            return attachment.url
    return None


def _author_icon_url(author: discord.abc.User) -> str:
    if author.avatar is not None:
        return author.avatar.url
    return author.default_avatar.url


async def _channel_name(bot: UnfurlBotClient, message: discord.Message) -> str:
    """Name of the message's channel, or "" when it can't be found."""
    name = getattr(message.channel, "name", None)
    if name:
        return name
    try:
        channel = await bot.fetch_channel(message.channel.id)
    except (discord.HTTPException, discord.InvalidData) as exc:
        logger.debug(
            "embed.channel_name_unavailable",
            channel_id=message.channel.id,
            error=str(exc),
        )
        return ""
    return getattr(channel, "name", None) or ""


def _description(content: str, jump_url: str) -> str:
    """Message body plus jump link, with the body cut to fit the embed limit."""
    link = f"\n\n[Jump to original message]({jump_url})"
    room = MAX_DESCRIPTION_LENGTH - len(link)
    if len(content) > room:
        content = content[: room - len(ELLIPSIS)] + ELLIPSIS
    return content + link


async def message_to_embed(
    bot: UnfurlBotClient, message: discord.Message
) -> discord.Embed:
    """Build a preview embed for ``message``."""
    embed = discord.Embed(
        description=_description(message.content, message.jump_url),
        colour=EMBED_COLOUR,
        timestamp=message.created_at,
    )
    embed.set_author(
        name=str(message.author),
        icon_url=_author_icon_url(message.author),
    )
    embed.set_footer(text=f"#{await _channel_name(bot, message)}")

    if message.attachments:
        for attachment in message.attachments:
            embed.add_field(
                name=ATTACHMENTS_FIELD_NAME,
                value=f"[{attachment.filename}]({attachment.url})",
                inline=False,
            )
        image = find_first_image(message)
        if image is not None:
            embed.set_image(url=image)

    return embed
