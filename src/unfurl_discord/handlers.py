"""Message hook that unfurls message links."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from .errors import UnfurlError
from .links import has_message_link
from .logging import get_logger
from .resolver import resolve_message_links

if TYPE_CHECKING:
    from .client import MessageHandler, UnfurlBotClient
    from .pluralkit import PluralKitClient

logger = get_logger(__name__)


def should_process_message(
    message: discord.Message,
    bot_user: discord.abc.User | None,
    *,
    guild_id: int | None = None,
) -> bool:
    """Determine if a message might contain links worth unfurling.

    Args:
        message: The Discord message
        bot_user: The bot's user object
        guild_id: If set, only process messages from this guild
    """
    # Ignore ourselves
    if bot_user is not None and message.author == bot_user:
        return False

    # Other bots are ignored, but proxied messages arrive through webhooks
    if message.author.bot and message.webhook_id is None:
        return False

    # Nothing is resolved in DMs
    if message.guild is None:
        return False

    if guild_id is not None and message.guild.id != guild_id:
        return False

    return has_message_link(message.content)


def make_message_handler(
    bot: UnfurlBotClient,
    *,
    pluralkit: PluralKitClient | None = None,
    guild_id: int | None = None,
) -> MessageHandler:
    """Build the ``on_message`` handler for the bot."""

    async def handle_message(message: discord.Message) -> None:
        if not should_process_message(message, bot.user, guild_id=guild_id):
            return

        logger.debug(
            "message.received",
            message_id=message.id,
            channel_id=message.channel.id,
            author_id=message.author.id,
            proxied=message.webhook_id is not None,
        )

        try:
            embeds = await resolve_message_links(bot, message, pluralkit=pluralkit)
        except UnfurlError:
            logger.exception("message.resolve_failed", message_id=message.id)
            return

        if not embeds:
            logger.debug("message.nothing_resolved", message_id=message.id)
            return

        try:
            await bot.reply_with_embeds(message, embeds)
        except discord.HTTPException:
            logger.exception("message.reply_failed", message_id=message.id)
            return

        logger.info(
            "message.unfurled",
            message_id=message.id,
            channel_id=message.channel.id,
            embeds=len(embeds),
        )

    return handle_message
