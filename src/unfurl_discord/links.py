"""Message permalink extraction."""

from __future__ import annotations

import re

from .errors import InvalidLinkError
from .types import MessageLink

MESSAGE_LINK_PATTERN = re.compile(
    r"(?:https?://)?(?:canary\.|ptb\.)?discord(?:app)?\.com/channels/"
    r"(?P<guild_id>\d+)/(?P<channel_id>\d+)/(?P<message_id>\d+)"
)

# Snowflakes are unsigned 64-bit integers
_MAX_SNOWFLAKE = 2**64


def parse_snowflake(value: str) -> int:
    """Parse a captured id, rejecting values that can't be a snowflake."""
    try:
        snowflake = int(value)
    except ValueError:
        raise InvalidLinkError(value) from None
    if snowflake <= 0 or snowflake >= _MAX_SNOWFLAKE:
        raise InvalidLinkError(value)
    return snowflake


def extract_message_links(content: str) -> list[MessageLink]:
    """Find every message permalink in ``content``, in order of appearance.

    Ids are kept as the captured digit strings; callers parse them with
    :func:`parse_snowflake` once they decide the link is worth resolving.
    """
    return [
        MessageLink(
            url=match.group(0),
            guild_id=match.group("guild_id"),
            channel_id=match.group("channel_id"),
            message_id=match.group("message_id"),
        )
        for match in MESSAGE_LINK_PATTERN.finditer(content)
    ]


def is_same_guild(link: MessageLink, guild_id: int) -> bool:
    """Compare the link's guild id with ``guild_id`` as integers."""
    return int(link.guild_id) == guild_id


def has_message_link(content: str) -> bool:
    return MESSAGE_LINK_PATTERN.search(content) is not None
