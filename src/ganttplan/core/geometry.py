from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ganttplan.core.models import Window

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


def fractional_days_between(a: datetime, b: datetime) -> float:
    """Days from ``a`` to ``b`` with sub-day precision (negative when b < a)."""
    return (b - a) / _ONE_DAY


def position(instant: datetime, window: Window, pixels_per_day: float, *, max_offset: float | None = None) -> float:
    """Pixel offset of ``instant`` from the window start, never negative.

    ``max_offset`` caps the result at the chart width when given.
    """
    offset = max(0.0, fractional_days_between(window.start, instant) * float(pixels_per_day))
    if max_offset is not None:
        offset = min(offset, max(0.0, float(max_offset)))
    return offset


def width(start: datetime, end: datetime, pixels_per_day: float, min_width: float | None = None) -> float:
    """Bar width for [start, end); at least ``min_width`` (one day when omitted)."""
    ppd = float(pixels_per_day)
    floor = ppd if min_width is None else float(min_width)
    days = fractional_days_between(start, end)
    if days < 0:
        logger.debug("Interval end %s before start %s; clamping to zero duration", end, start)
        days = 0.0
    return max(floor, days * ppd)


def today_offset(
    today: datetime,
    window: Window,
    pixels_per_day: float,
    *,
    origin: datetime | None = None,
) -> float | None:
    """Offset of the today marker from ``origin`` (the window start by default).

    None when today is outside the visible window [start, end).
    """
    if not window.contains(today):
        return None
    start = window.start if origin is None else origin
    return max(0.0, fractional_days_between(start, today) * float(pixels_per_day))


def scroll_target(offset: float | None, viewport_width: float) -> float:
    """Horizontal scroll position that centres ``offset`` in the viewport."""
    if offset is None:
        return 0.0
    return max(0.0, float(offset) - float(viewport_width) / 2)
