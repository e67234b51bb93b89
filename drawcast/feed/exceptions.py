"""Feed-specific exceptions.

Both failures are fatal for a prediction cycle: the engine never retries
the upstream feed and never proceeds with partial data.
"""

from __future__ import annotations

from drawcast.common.exceptions import DrawcastError


class FeedError(DrawcastError):
    """Base exception for all draw feed errors."""


class FetchError(FeedError):
    """Raised when the upstream draw feed cannot be reached or answers non-2xx."""


class ParseError(FeedError):
    """Raised when the upstream payload does not have the expected structure."""
