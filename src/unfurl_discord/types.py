"""Type definitions for message link unfurling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class MessageLink:
    """A message permalink found in message content.

    Ids are the digit strings exactly as they appeared in the URL.
    """

    url: str
    guild_id: str
    channel_id: str
    message_id: str


@dataclass(frozen=True, slots=True)
class ProxiedAuthor:
    """Author recovered from the message-proxy service."""

    user_id: int


@dataclass(frozen=True, slots=True)
class NominalAuthor:
    """The message's own author, used when no proxy record applies."""

    user_id: int


AuthorResolution = Union[ProxiedAuthor, NominalAuthor]
