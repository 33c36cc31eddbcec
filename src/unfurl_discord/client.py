"""Discord API client wrapper."""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING, Any, Union

import discord

from .logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Sequence

    MessageHandler = Callable[[discord.Message], Coroutine[Any, Any, None]]

logger = get_logger(__name__)

# Channels that live inside a guild and can hold messages we may link to
GuildMessageChannel = Union[discord.abc.GuildChannel, discord.Thread]

MAX_EMBEDS_PER_MESSAGE = 10
# Combined text of all embeds in one message
MAX_EMBED_CHARS_PER_MESSAGE = 6000


class UnfurlBotClient:
    """Wrapper around Pycord Bot for message link unfurling."""

    def __init__(self, token: str) -> None:
        self._token = token
        self._message_handler: MessageHandler | None = None
        # Defer bot creation until inside async context
        self._bot: discord.Bot | None = None
        self._ready_event: asyncio.Event | None = None
        self._start_task: asyncio.Task[None] | None = None

    def _ensure_bot(self) -> discord.Bot:
        """Create the bot if not already created. Must be called from async context."""
        if self._bot is not None:
            return self._bot

        intents = discord.Intents.default()
        # Required to read links out of message content
        intents.message_content = True
        intents.guilds = True
        intents.messages = True
        self._bot = discord.Bot(intents=intents)
        self._ready_event = asyncio.Event()

        @self._bot.event
        async def on_ready() -> None:
            assert self._ready_event is not None
            self._ready_event.set()

        @self._bot.event
        async def on_message(message: discord.Message) -> None:
            if self._message_handler is not None:
                await self._message_handler(message)

        return self._bot

    @property
    def bot(self) -> discord.Bot:
        """Get the underlying Pycord bot. Creates it if needed."""
        return self._ensure_bot()

    @property
    def user(self) -> discord.ClientUser | None:
        """Get the bot user."""
        if self._bot is None:
            return None
        return self._bot.user

    def set_message_handler(self, handler: MessageHandler) -> None:
        """Set the message handler."""
        self._message_handler = handler

    async def start(self) -> None:
        """Start the bot and wait until ready."""
        bot = self._ensure_bot()
        assert self._ready_event is not None

        async def _run_bot() -> None:
            try:
                await bot.start(self._token)
            except asyncio.CancelledError:
                pass
            except RuntimeError as e:
                # Suppress "Session is closed" error during shutdown
                if "Session is closed" not in str(e):
                    raise

        self._start_task = asyncio.create_task(_run_bot(), name="discord-bot-start")
        await self._ready_event.wait()

    async def close(self) -> None:
        """Close the bot connection."""
        if self._bot is not None:
            await self._bot.close()
            if self._start_task is not None and not self._start_task.done():
                self._start_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._start_task

    # Object lookups, always against the API rather than the cache

    async def fetch_channel(
        self, channel_id: int
    ) -> discord.abc.GuildChannel | discord.abc.PrivateChannel | discord.Thread:
        """Fetch a channel of any kind."""
        return await self.bot.fetch_channel(channel_id)

    async def fetch_guild_channel(self, channel_id: int) -> GuildMessageChannel | None:
        """Fetch a channel, returning None if it isn't part of a guild."""
        channel = await self.fetch_channel(channel_id)
        if isinstance(channel, (discord.abc.GuildChannel, discord.Thread)):
            return channel
        return None

    async def fetch_message(
        self, channel: GuildMessageChannel, message_id: int
    ) -> discord.Message:
        """Fetch a message from a guild channel or thread."""
        return await channel.fetch_message(message_id)

    # Raw payloads for permission snapshots

    async def fetch_guild_payload(self, guild_id: int) -> dict[str, Any]:
        return await self.bot.http.get_guild(guild_id)

    async def fetch_channel_payload(self, channel_id: int) -> dict[str, Any]:
        return await self.bot.http.get_channel(channel_id)

    async def fetch_member_payload(self, guild_id: int, user_id: int) -> dict[str, Any]:
        return await self.bot.http.get_member(guild_id, user_id)

    async def reply_with_embeds(
        self,
        message: discord.Message,
        embeds: Sequence[discord.Embed],
    ) -> list[discord.Message]:
        """Reply to ``message`` with ``embeds``, batched to the per-message limits."""
        sent: list[discord.Message] = []
        for batch in batch_embeds(embeds):
            sent.append(await message.reply(embeds=batch, mention_author=False))
        logger.debug(
            "reply.sent",
            message_id=message.id,
            embeds=len(embeds),
            replies=len(sent),
        )
        return sent


def batch_embeds(embeds: Sequence[discord.Embed]) -> list[list[discord.Embed]]:
    """Split embeds into groups that fit in one message.

    A group holds at most ``MAX_EMBEDS_PER_MESSAGE`` embeds whose combined
    length stays within ``MAX_EMBED_CHARS_PER_MESSAGE``. An embed too large on
    its own still gets a group to itself.
    """
    batches: list[list[discord.Embed]] = []
    batch: list[discord.Embed] = []
    chars = 0
    for embed in embeds:
        size = len(embed)
        if batch and (
            len(batch) >= MAX_EMBEDS_PER_MESSAGE
            or chars + size > MAX_EMBED_CHARS_PER_MESSAGE
        ):
            batches.append(batch)
            batch, chars = [], 0
        batch.append(embed)
        chars += size
    if batch:
        batches.append(batch)
    return batches
