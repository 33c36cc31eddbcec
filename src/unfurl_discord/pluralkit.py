"""PluralKit message lookup for proxied (webhook) messages."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import aiohttp
import msgspec

from .config import DEFAULT_HTTP_TIMEOUT, DEFAULT_PLURALKIT_URL
from .logging import get_logger
from .types import AuthorResolution, NominalAuthor, ProxiedAuthor

if TYPE_CHECKING:
    import discord

logger = get_logger(__name__)


class PluralKitError(Exception):
    """Lookup failed or PluralKit has no record of the message."""


class ProxiedMessage(msgspec.Struct):
    """The part of PluralKit's message object we read."""

    sender: int


class PluralKitClient:
    """Small aiohttp client for the PluralKit v2 API."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_PLURALKIT_URL,
        user_agent: str = "unfurl-discord",
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    def _ensure_session(self) -> aiohttp.ClientSession:
        """Create the session lazily. Must be called from async context."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout,
            )
            self._owns_session = True
        return self._session

    async def sender_of(self, message_id: int) -> int:
        """Return the user id of the account that sent a proxied message."""
        session = self._ensure_session()
        url = f"{self._base_url}/messages/{message_id}"
        async with session.get(url) as response:
            if response.status != 200:
                raise PluralKitError(
                    f"PluralKit returned {response.status} for message {message_id}"
                )
            body = await response.read()
        try:
            record = msgspec.json.decode(body, type=ProxiedMessage, strict=False)
        except msgspec.DecodeError as exc:  # ValidationError is a subclass
            raise PluralKitError(
                f"Unexpected PluralKit payload for message {message_id}"
            ) from exc
        return record.sender

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None


async def find_real_author_id(
    client: PluralKitClient, message: discord.Message
) -> AuthorResolution:
    """Resolve who actually wrote ``message``.

    Falls back to the message's own author when PluralKit can't tell us.
    """
    try:
        sender = await client.sender_of(message.id)
    except (PluralKitError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
        logger.debug(
            "pluralkit.lookup_failed",
            message_id=message.id,
            error=str(exc) or type(exc).__name__,
        )
        return NominalAuthor(message.author.id)
    logger.debug("pluralkit.resolved", message_id=message.id, sender=sender)
    return ProxiedAuthor(sender)
