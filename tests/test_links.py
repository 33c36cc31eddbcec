"""Tests for message permalink extraction."""

import pytest

from unfurl_discord.errors import InvalidLinkError
from unfurl_discord.links import (
    extract_message_links,
    has_message_link,
    is_same_guild,
    parse_snowflake,
)


class TestExtractMessageLinks:
    def test_plain_link(self):
        links = extract_message_links(
            "check this out https://discord.com/channels/100/200/300"
        )
        assert len(links) == 1
        link = links[0]
        assert link.url == "https://discord.com/channels/100/200/300"
        assert (link.guild_id, link.channel_id, link.message_id) == ("100", "200", "300")

    @pytest.mark.parametrize(
        "url",
        [
            "https://canary.discord.com/channels/1/2/3",
            "https://ptb.discord.com/channels/1/2/3",
            "http://discordapp.com/channels/1/2/3",
            "discord.com/channels/1/2/3",
        ],
    )
    def test_domain_variants(self, url):
        links = extract_message_links(f"see {url} please")
        assert [link.url for link in links] == [url]

    def test_order_is_preserved(self):
        content = (
            "first https://discord.com/channels/1/2/30 "
            "then https://discord.com/channels/1/2/10"
        )
        assert [link.message_id for link in extract_message_links(content)] == ["30", "10"]

    def test_non_message_urls_ignored(self):
        content = "https://discord.com/channels/1/2 and https://example.com/channels/1/2/3"
        assert extract_message_links(content) == []

    def test_no_links(self):
        assert extract_message_links("just chatting") == []
        assert not has_message_link("just chatting")

    def test_has_message_link(self):
        assert has_message_link("x https://discord.com/channels/1/2/3 y")


class TestParseSnowflake:
    def test_valid(self):
        assert parse_snowflake("1234567890123456789") == 1234567890123456789

    @pytest.mark.parametrize("value", ["0", str(2**64), "abc"])
    def test_invalid(self, value):
        with pytest.raises(InvalidLinkError):
            parse_snowflake(value)


class TestSameGuild:
    def test_compares_numerically(self):
        (link,) = extract_message_links("https://discord.com/channels/0100/2/3")
        assert is_same_guild(link, 100)

    def test_other_guild(self):
        (link,) = extract_message_links("https://discord.com/channels/999/2/3")
        assert not is_same_guild(link, 100)
