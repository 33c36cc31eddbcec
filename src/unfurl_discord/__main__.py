"""Command-line entry point: ``python -m unfurl_discord``."""

from __future__ import annotations

import sys

import anyio

from .config import ConfigError, UnfurlConfig
from .logging import get_logger, setup_logging
from .loop import run_main_loop

logger = get_logger(__name__)


def main() -> int:
    try:
        cfg = UnfurlConfig.from_env()
    except ConfigError as exc:
        setup_logging()
        logger.error("config.invalid", error=str(exc))
        return 2

    setup_logging(debug=cfg.debug)
    try:
        anyio.run(run_main_loop, cfg)
    except KeyboardInterrupt:
        logger.info("bot.shutdown")
    return 0


if __name__ == "__main__":
    sys.exit(main())
