"""Period identifier arithmetic.

A period is ``YYYYMMDD`` followed by a zero-padded daily sequence number,
e.g. ``202610170842`` is draw 842 of 17 Oct 2026. With one draw per minute a
day holds 1440 periods; the draw after the last one is ``0001`` of the next day.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from drawcast.prediction.exceptions import PeriodFormatError

DATE_WIDTH = 8
MIN_SEQUENCE_WIDTH = 4
DEFAULT_PERIODS_PER_DAY = 1440


def split_period(period: str) -> tuple[datetime, int, int]:
    """Split a period into (day, sequence, sequence width).

    Raises:
        PeriodFormatError: If the date or sequence part is not valid.
    """
    date_part, seq_part = period[:DATE_WIDTH], period[DATE_WIDTH:]
    if not seq_part.isdigit():
        raise PeriodFormatError(f"Period {period!r} has no numeric sequence part")
    try:
        day = datetime.strptime(date_part, "%Y%m%d")
    except ValueError as exc:
        raise PeriodFormatError(f"Period {period!r} does not start with YYYYMMDD") from exc
    return day, int(seq_part), len(seq_part)


def next_period(current: str, periods_per_day: int = DEFAULT_PERIODS_PER_DAY) -> str:
    """Identifier of the draw that follows ``current``.

    >>> next_period("202610170999")
    '202610171000'
    >>> next_period("202610171440")
    '202610180001'
    """
    day, sequence, width = split_period(str(current))
    width = max(width, MIN_SEQUENCE_WIDTH)

    if sequence >= periods_per_day:
        tomorrow = day + timedelta(days=1)
        return f"{tomorrow:%Y%m%d}{1:0{width}d}"

    return f"{day:%Y%m%d}{sequence + 1:0{width}d}"
