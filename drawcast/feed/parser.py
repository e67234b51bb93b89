"""Draw parsing: converts the raw feed payload into DrawResult records.

The upstream history page looks like::

    {"data": {"list": [{"issueNumber": "202610170842", "number": "7",
                        "openTime": 1792233720000}, ...]}}

Items arrive newest first and that order is preserved.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import ValidationError

from drawcast.common.logging import get_logger
from drawcast.common.schemas import DrawResult
from drawcast.feed.exceptions import ParseError

logger = get_logger("FEED")


def _from_epoch_ms(millis: float) -> datetime | None:
    try:
        return datetime.fromtimestamp(millis / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_open_time(raw: object) -> datetime | None:
    """Best-effort conversion of the feed's openTime into an aware datetime.

    Accepts epoch milliseconds, ISO-8601 strings, and "YYYY-MM-DD HH:MM:SS".
    The timestamp is informational, so anything unrecognised or out of range
    becomes None.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, int | float):
        return _from_epoch_ms(raw)
    if isinstance(raw, str):
        if raw.isdigit():
            return _from_epoch_ms(int(raw))
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def parse_draws(payload: dict) -> list[DrawResult]:
    """Normalize the upstream history payload into a list of DrawResult.

    Args:
        payload: Decoded JSON body of the history endpoint.

    Returns:
        DrawResult list, newest first.

    Raises:
        ParseError: If ``data.list`` is missing or any item is malformed.
    """
    try:
        items = payload["data"]["list"]
    except (KeyError, TypeError) as exc:
        raise ParseError("Invalid data format: missing data.list") from exc

    if not isinstance(items, list):
        raise ParseError(
            "Invalid data format: data.list is not a list",
            context={"type": type(items).__name__},
        )

    draws: list[DrawResult] = []
    for idx, item in enumerate(items):
        try:
            draws.append(
                DrawResult(
                    period=str(item["issueNumber"]),
                    number=int(item["number"]),
                    observed_at=_parse_open_time(item.get("openTime")),
                )
            )
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            raise ParseError(
                f"Malformed draw record at index {idx}",
                context={"item": item},
            ) from exc

    logger.debug(
        "Draws parsed",
        extra={
            "data": {
                "count": len(draws),
                "newest": draws[0].period if draws else None,
            }
        },
    )
    return draws
