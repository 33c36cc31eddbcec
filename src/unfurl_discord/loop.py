"""Main event loop for the unfurl bot."""

from __future__ import annotations

from typing import TYPE_CHECKING

import anyio

from .client import UnfurlBotClient
from .handlers import make_message_handler
from .logging import get_logger
from .pluralkit import PluralKitClient

if TYPE_CHECKING:
    from .config import UnfurlConfig

logger = get_logger(__name__)

__all__ = ["run_main_loop"]


async def run_main_loop(cfg: UnfurlConfig) -> None:
    """Run the bot until cancelled."""
    bot = UnfurlBotClient(cfg.token)
    pluralkit: PluralKitClient | None = None
    if cfg.resolve_proxied:
        pluralkit = PluralKitClient(
            base_url=cfg.pluralkit_base_url,
            user_agent=cfg.user_agent,
            timeout=cfg.http_timeout,
        )

    logger.info(
        "loop.config",
        guild_id=cfg.guild_id,
        resolve_proxied=cfg.resolve_proxied,
        pluralkit_url=cfg.pluralkit_base_url if pluralkit is not None else None,
    )

    bot.set_message_handler(
        make_message_handler(bot, pluralkit=pluralkit, guild_id=cfg.guild_id)
    )

    try:
        await bot.start()
        logger.info("bot.ready", user=bot.user.name if bot.user else "unknown")
        # Keep running until cancelled
        await anyio.sleep_forever()
    finally:
        await bot.close()
        if pluralkit is not None:
            await pluralkit.close()
