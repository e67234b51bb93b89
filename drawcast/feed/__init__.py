"""Draw feed: fetches and normalizes the upstream draw history.

Public API:
    - client: DrawFeedClient (async fetch with short TTL cache)
    - parser: parse_draws (wire payload → DrawResult list)
"""

from __future__ import annotations

from drawcast.feed.client import DrawFeedClient
from drawcast.feed.exceptions import FeedError, FetchError, ParseError
from drawcast.feed.parser import parse_draws

__all__ = [
    "DrawFeedClient",
    "FeedError",
    "FetchError",
    "ParseError",
    "parse_draws",
]
