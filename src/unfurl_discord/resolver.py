"""Resolve message links into preview embeds, respecting channel permissions."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord
import msgspec

from .embeds import message_to_embed
from .errors import (
    ChannelResolutionError,
    GuildResolutionError,
    MemberResolutionError,
    MessageFetchError,
    ThreadParentError,
)
from .links import extract_message_links, is_same_guild, parse_snowflake
from .logging import get_logger
from .permissions import (
    ChannelSnapshot,
    GuildSnapshot,
    MemberSnapshot,
    can_view,
    decode_channel,
    decode_guild,
    decode_member,
    visibility_target,
)
from .pluralkit import find_real_author_id

if TYPE_CHECKING:
    from .client import GuildMessageChannel, UnfurlBotClient
    from .pluralkit import PluralKitClient

logger = get_logger(__name__)

# Errors the REST layer raises for missing or unreadable objects
_LOOKUP_ERRORS = (discord.HTTPException, discord.InvalidData, msgspec.ValidationError)


async def _channel_snapshot(bot: UnfurlBotClient, channel_id: int) -> ChannelSnapshot:
    try:
        return decode_channel(await bot.fetch_channel_payload(channel_id))
    except _LOOKUP_ERRORS as exc:
        raise ChannelResolutionError(channel_id) from exc


async def _parent_snapshot(
    bot: UnfurlBotClient, thread_id: int, parent_id: int
) -> ChannelSnapshot:
    try:
        parent = decode_channel(await bot.fetch_channel_payload(parent_id))
    except _LOOKUP_ERRORS as exc:
        raise ThreadParentError(thread_id) from exc
    if parent.guild_id is None:
        raise ThreadParentError(thread_id)
    return parent


async def _guild_snapshot(bot: UnfurlBotClient, guild_id: int) -> GuildSnapshot:
    try:
        return decode_guild(await bot.fetch_guild_payload(guild_id))
    except _LOOKUP_ERRORS as exc:
        raise GuildResolutionError(guild_id) from exc


async def fetch_member(
    bot: UnfurlBotClient, guild_id: int, user_id: int
) -> MemberSnapshot:
    """Fetch a member's current roles in a guild."""
    try:
        return decode_member(await bot.fetch_member_payload(guild_id, user_id))
    except _LOOKUP_ERRORS as exc:
        raise MemberResolutionError(guild_id, user_id) from exc


async def member_can_view_channel(
    bot: UnfurlBotClient,
    member: MemberSnapshot,
    channel: GuildMessageChannel,
) -> bool:
    """Check whether ``member`` can view and read history in ``channel``.

    Threads are checked against their parent, since overwrites live there.
    Channel kinds other than text, news and public threads are never viewable.
    Guild and channel state is fetched fresh on every call.
    """
    snapshot = await _channel_snapshot(bot, channel.id)
    target_id = visibility_target(snapshot)
    if target_id is None:
        logger.debug(
            "visibility.unsupported_channel",
            channel_id=snapshot.id,
            channel_type=snapshot.type,
        )
        return False

    if target_id == snapshot.id:
        target = snapshot
    else:
        target = await _parent_snapshot(bot, snapshot.id, target_id)

    guild = await _guild_snapshot(bot, channel.guild.id)
    return can_view(guild, member, target)


async def resolve_message_links(
    bot: UnfurlBotClient,
    message: discord.Message,
    *,
    pluralkit: PluralKitClient | None = None,
) -> list[discord.Embed]:
    """Build embeds for every same-guild message link in ``message``.

    Links are checked against the permissions of the real author: for
    proxied (webhook) messages that is the account PluralKit reports, when
    ``pluralkit`` is given. Links the author can't see and links to other
    guilds are skipped. Lookup failures abort the whole call.
    """
    if message.guild is None:
        logger.debug("links.skip_dm", message_id=message.id)
        return []
    guild_id = message.guild.id

    links = extract_message_links(message.content)
    if not links:
        return []

    # for proxied messages, permissions belong to the account behind the proxy
    author_id = message.author.id
    if message.webhook_id is not None and pluralkit is not None:
        author_id = (await find_real_author_id(pluralkit, message)).user_id

    author = await fetch_member(bot, guild_id, author_id)

    embeds: list[discord.Embed] = []
    for link in links:
        if not is_same_guild(link, guild_id):
            logger.debug("links.skip_other_guild", url=link.url)
            continue
        logger.debug(
            "links.resolving",
            url=link.url,
            message_id=link.message_id,
        )

        channel_id = parse_snowflake(link.channel_id)
        try:
            channel = await bot.fetch_guild_channel(channel_id)
        except _LOOKUP_ERRORS as exc:
            raise ChannelResolutionError(channel_id) from exc
        if channel is None:
            raise ChannelResolutionError(channel_id)

        if not await member_can_view_channel(bot, author, channel):
            logger.debug(
                "links.skip_not_visible",
                channel_id=channel_id,
                user_id=author.id,
            )
            continue

        message_id = parse_snowflake(link.message_id)
        try:
            target = await bot.fetch_message(channel, message_id)
        except _LOOKUP_ERRORS as exc:
            raise MessageFetchError(message_id) from exc

        embeds.append(await message_to_embed(bot, target))

    return embeds
