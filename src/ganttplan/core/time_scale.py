"""Time-scale header: labeled calendar segments and the per-day grid.

Segments start on period boundaries (ISO week, month, quarter) at or before the
visible window start and keep coming until the next boundary is no longer
before the window end, so the sequence always covers the whole window. The loop
is bounded by dates, never by pixels.

The first segment start is the chart origin: segment offsets, bars, the day
grid and the today marker are all measured from it.
"""

from __future__ import annotations

import calendar
from dataclasses import replace
from datetime import datetime, timedelta

from ganttplan.core.models import DayColumn, DayTick, LabelSegment, Window

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
TICK_DAYS = (1, 10, 20)


def _midnight(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def _add_months(value: datetime, months: int) -> datetime:
    idx = value.month - 1 + months
    return value.replace(year=value.year + idx // 12, month=idx % 12 + 1, day=1)


def week_start(value: datetime) -> datetime:
    d = _midnight(value)
    return d - timedelta(days=d.weekday())


def month_start(value: datetime) -> datetime:
    return _midnight(value).replace(day=1)


def quarter_start(value: datetime) -> datetime:
    m = 3 * ((value.month - 1) // 3) + 1
    return _midnight(value).replace(month=m, day=1)


def days_in_month(value: datetime) -> int:
    return calendar.monthrange(value.year, value.month)[1]


def days_in_quarter(value: datetime) -> int:
    q0 = quarter_start(value)
    return sum(days_in_month(_add_months(q0, i)) for i in range(3))


def _ticks(segment_start: datetime, pixels_per_day: float) -> tuple[DayTick, ...]:
    last_day = days_in_month(segment_start)
    return tuple(DayTick(day=d, offset=(d - 1) * pixels_per_day) for d in TICK_DAYS if d <= last_day)


def generate_labels(window: Window, granularity: str, pixels_per_day: float) -> tuple[LabelSegment, ...]:
    """Partition ``window`` into contiguous labeled segments.

    - week: "Week {iso week}", 7 days wide
    - month: "{Mon} {Year}", days-in-month wide
    - quarter: "Q{n} {Year}", days-in-quarter wide

    Unknown granularities are treated as "month".
    """
    ppd = float(pixels_per_day)
    out: list[LabelSegment] = []

    if granularity == "week":
        cursor = week_start(window.start)
        while cursor < window.end:
            out.append(
                LabelSegment(
                    start=cursor,
                    label=f"Week {cursor.isocalendar()[1]}",
                    width=7 * ppd,
                )
            )
            cursor = cursor + timedelta(days=7)
    elif granularity == "quarter":
        cursor = quarter_start(window.start)
        while cursor < window.end:
            out.append(
                LabelSegment(
                    start=cursor,
                    label=f"Q{(cursor.month - 1) // 3 + 1} {cursor.year}",
                    width=days_in_quarter(cursor) * ppd,
                    ticks=_ticks(cursor, ppd),
                )
            )
            cursor = _add_months(cursor, 3)
    else:
        cursor = month_start(window.start)
        while cursor < window.end:
            out.append(
                LabelSegment(
                    start=cursor,
                    label=f"{MONTH_ABBR[cursor.month - 1]} {cursor.year}",
                    width=days_in_month(cursor) * ppd,
                    ticks=_ticks(cursor, ppd),
                )
            )
            cursor = _add_months(cursor, 1)

    placed: list[LabelSegment] = []
    offset = 0.0
    for seg in out:
        placed.append(replace(seg, offset=offset))
        offset += seg.width
    return tuple(placed)


def chart_width(segments: tuple[LabelSegment, ...] | list[LabelSegment]) -> float:
    """Scrollable chart width; the only place the total width is computed."""
    return float(sum(s.width for s in segments))


def chart_window(window: Window, segments: tuple[LabelSegment, ...], pixels_per_day: float) -> Window:
    """Calendar span of the chart, from the first segment start to the end of the last one."""
    if not segments:
        return window
    last = segments[-1]
    end = last.start + timedelta(days=round(last.width / float(pixels_per_day)))
    return Window(start=segments[0].start, end=end)


def day_columns(window: Window, pixels_per_day: float, *, today: datetime | None = None) -> tuple[DayColumn, ...]:
    """One background column per whole day of the window, weekends flagged."""
    today_date = today.date() if today is not None else None
    cols: list[DayColumn] = []
    for i in range(int(window.days)):
        day = window.start + timedelta(days=i)
        cols.append(
            DayColumn(
                day=day,
                offset=i * float(pixels_per_day),
                width=float(pixels_per_day),
                is_weekend=day.weekday() >= 5,
                is_today=(today_date is not None and day.date() == today_date),
            )
        )
    return tuple(cols)
