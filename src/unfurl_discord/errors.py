"""Errors raised while resolving message links."""

from __future__ import annotations


class UnfurlError(Exception):
    """Base error for link resolution failures."""


class InvalidLinkError(UnfurlError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Not a valid snowflake in message link: {value!r}")
        self.value = value


class MemberResolutionError(UnfurlError):
    def __init__(self, guild_id: int, user_id: int) -> None:
        super().__init__(f"Couldn't fetch member {user_id} in guild {guild_id}")
        self.guild_id = guild_id
        self.user_id = user_id


class ChannelResolutionError(UnfurlError):
    def __init__(self, channel_id: int) -> None:
        super().__init__(f"Couldn't find guild channel from channel ID {channel_id}")
        self.channel_id = channel_id


class ThreadParentError(UnfurlError):
    def __init__(self, channel_id: int) -> None:
        super().__init__(f"Couldn't get parent of thread {channel_id}")
        self.channel_id = channel_id


class MessageFetchError(UnfurlError):
    def __init__(self, message_id: int) -> None:
        super().__init__(f"Couldn't find channel message from ID {message_id}")
        self.message_id = message_id


class GuildResolutionError(UnfurlError):
    def __init__(self, guild_id: int) -> None:
        super().__init__(f"Couldn't fetch guild {guild_id}")
        self.guild_id = guild_id
