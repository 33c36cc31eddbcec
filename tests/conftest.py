"""Shared fakes for Discord objects and the bot client."""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

GUILD_ID = 100
EVERYONE = GUILD_ID
VIEW = discord.Permissions(view_channel=True).value
HISTORY = discord.Permissions(read_message_history=True).value
VIEW_AND_HISTORY = VIEW | HISTORY

SENT_AT = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


def make_attachment(filename, url, content_type=None):
    return SimpleNamespace(filename=filename, url=url, content_type=content_type)


def make_user(user_id=1, tag="alice", avatar_url=None, bot=False):
    user = MagicMock()
    user.id = user_id
    user.bot = bot
    user.__str__.return_value = tag
    user.avatar = SimpleNamespace(url=avatar_url) if avatar_url else None
    user.default_avatar = SimpleNamespace(
        url="https://cdn.discordapp.com/embed/avatars/0.png"
    )
    return user


def make_channel(channel_id=200, name="general", guild_id=GUILD_ID):
    channel = MagicMock()
    channel.id = channel_id
    channel.name = name
    channel.guild.id = guild_id
    return channel


def make_message(
    content="hello",
    *,
    message_id=300,
    guild_id=GUILD_ID,
    channel=None,
    author=None,
    attachments=None,
    webhook_id=None,
):
    channel = channel or make_channel()
    message = MagicMock()
    message.id = message_id
    message.content = content
    message.channel = channel
    message.guild = SimpleNamespace(id=guild_id) if guild_id is not None else None
    message.author = author or make_user()
    message.attachments = attachments or []
    message.webhook_id = webhook_id
    message.created_at = SENT_AT
    message.jump_url = (
        f"https://discord.com/channels/{guild_id}/{channel.id}/{message_id}"
    )
    return message


def guild_payload(roles=None, owner_id=999):
    roles = roles if roles is not None else {EVERYONE: VIEW_AND_HISTORY}
    return {
        "id": str(GUILD_ID),
        "owner_id": str(owner_id),
        "roles": [
            {"id": str(role_id), "permissions": str(value)}
            for role_id, value in roles.items()
        ],
    }


def member_payload(user_id=1, roles=()):
    return {"user": {"id": str(user_id)}, "roles": [str(r) for r in roles]}


def channel_payload(
    channel_id=200,
    *,
    kind=0,
    parent_id=None,
    overwrites=(),
    guild_id=GUILD_ID,
    name="general",
):
    payload = {
        "id": str(channel_id),
        "type": kind,
        "name": name,
        "permission_overwrites": [
            {
                "id": str(target),
                "type": target_type,
                "allow": str(allow),
                "deny": str(deny),
            }
            for target, target_type, allow, deny in overwrites
        ],
        "parent_id": str(parent_id) if parent_id is not None else None,
    }
    if guild_id is not None:
        payload["guild_id"] = str(guild_id)
    return payload


def http_error(cls=discord.NotFound, status=404, text="Unknown"):
    return cls(MagicMock(status=status, reason=text), text)


class FakeBot:
    """Stands in for UnfurlBotClient, backed by dictionaries."""

    def __init__(self):
        self.user = make_user(user_id=42, tag="unfurl", bot=True)
        self.guild = guild_payload()
        self.members = {1: member_payload()}
        self.channel_payloads = {200: channel_payload()}
        self.channels = {200: make_channel()}
        self.messages = {}

        self.fetch_guild_payload = AsyncMock(side_effect=self._guild)
        self.fetch_member_payload = AsyncMock(side_effect=self._member)
        self.fetch_channel_payload = AsyncMock(side_effect=self._channel_payload)
        self.fetch_guild_channel = AsyncMock(side_effect=self._guild_channel)
        self.fetch_channel = AsyncMock(side_effect=self._guild_channel)
        self.fetch_message = AsyncMock(side_effect=self._message)
        self.reply_with_embeds = AsyncMock(return_value=[])

    async def _guild(self, guild_id):
        return self.guild

    async def _member(self, guild_id, user_id):
        try:
            return self.members[user_id]
        except KeyError:
            raise http_error(text="Unknown Member") from None

    async def _channel_payload(self, channel_id):
        try:
            return self.channel_payloads[channel_id]
        except KeyError:
            raise http_error(text="Unknown Channel") from None

    async def _guild_channel(self, channel_id):
        try:
            return self.channels[channel_id]
        except KeyError:
            raise http_error(text="Unknown Channel") from None

    async def _message(self, channel, message_id):
        try:
            return self.messages[(channel.id, message_id)]
        except KeyError:
            raise http_error(text="Unknown Message") from None

    def add_message(self, message):
        self.messages[(message.channel.id, message.id)] = message


@pytest.fixture
def bot():
    return FakeBot()
