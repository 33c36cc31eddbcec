"""Runtime configuration loaded from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from . import __version__

DEFAULT_PLURALKIT_URL = "https://api.pluralkit.me/v2"
DEFAULT_HTTP_TIMEOUT = 5.0

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Raised when the environment holds an unusable setting."""


def _flag(value: str | None, *, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


@dataclass(frozen=True, slots=True)
class UnfurlConfig:
    """Settings for the unfurl bot."""

    token: str
    guild_id: int | None = None
    pluralkit_base_url: str = DEFAULT_PLURALKIT_URL
    user_agent: str = f"unfurl-discord/{__version__}"
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    resolve_proxied: bool = True
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> UnfurlConfig:
        """Build a config from ``environ`` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ

        token = env.get("DISCORD_TOKEN", "").strip()
        if not token:
            raise ConfigError("DISCORD_TOKEN is not set")

        guild_id: int | None = None
        raw_guild = env.get("UNFURL_GUILD_ID", "").strip()
        if raw_guild:
            try:
                guild_id = int(raw_guild)
            except ValueError:
                raise ConfigError(
                    f"UNFURL_GUILD_ID must be a numeric id, got {raw_guild!r}"
                ) from None

        raw_timeout = env.get("UNFURL_HTTP_TIMEOUT", "").strip()
        http_timeout = DEFAULT_HTTP_TIMEOUT
        if raw_timeout:
            try:
                http_timeout = float(raw_timeout)
            except ValueError:
                raise ConfigError(
                    f"UNFURL_HTTP_TIMEOUT must be a number, got {raw_timeout!r}"
                ) from None
            if http_timeout <= 0:
                raise ConfigError("UNFURL_HTTP_TIMEOUT must be positive")

        return cls(
            token=token,
            guild_id=guild_id,
            pluralkit_base_url=(
                env.get("UNFURL_PLURALKIT_URL", "").strip() or DEFAULT_PLURALKIT_URL
            ).rstrip("/"),
            user_agent=(
                env.get("UNFURL_USER_AGENT", "").strip()
                or f"unfurl-discord/{__version__}"
            ),
            http_timeout=http_timeout,
            resolve_proxied=_flag(env.get("UNFURL_RESOLVE_PROXIED"), default=True),
            debug=_flag(env.get("UNFURL_DEBUG"), default=False),
        )
