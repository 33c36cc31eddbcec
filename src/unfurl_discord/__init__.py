"""Unfurl Discord message links into embeds."""

__version__ = "0.1.0"
