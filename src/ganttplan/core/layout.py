"""Assemble the renderable timeline model.

Pure combination of the time-scale header, bar geometry and today marker for a
given order list and view parameters. Rows follow input order, one order per
row, so bars can never overlap.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from ganttplan.core.colors import priority_color, status_color
from ganttplan.core.geometry import position, today_offset, width
from ganttplan.core.models import PRIORITIES, Bar, Order, TimelineConfig, TimelineLayout, Tooltip, Window
from ganttplan.core.time_scale import MONTH_ABBR, chart_width, chart_window, day_columns, generate_labels

FILTER_STATUSES: tuple[str, ...] = ("Released", "In Progress", "Delayed", "Done", "Finished")

PRIORITY_FILTER_OPTIONS: list[dict[str, str]] = [{"value": "", "label": "All Priorities"}] + [
    {"value": p, "label": p} for p in PRIORITIES
]


def status_filter_options(stored: Iterable[str] = ()) -> list[dict[str, str]]:
    """Status choices: "All", the common statuses, then any other status found in storage."""
    values = list(FILTER_STATUSES)
    for status in stored:
        status = str(status or "").strip()
        if status and status not in values:
            values.append(status)
    return [{"value": "", "label": "All Orders"}] + [{"value": v, "label": v} for v in values]


def format_date(value: datetime) -> str:
    """e.g. 'May 10, 2025'."""
    return f"{MONTH_ABBR[value.month - 1]} {value.day}, {value.year}"


def build_tooltip(order: Order) -> Tooltip:
    return Tooltip(
        order_id=order.order_id,
        order_number=order.order_number,
        part_no=order.part_no,
        description=order.description,
        status=order.status,
        priority=order.priority,
        start=format_date(order.start),
        end=format_date(order.end),
    )


def build_bar(
    order: Order,
    row: int,
    *,
    chart: Window,
    pixels_per_day: float,
    chart_px: float,
    config: TimelineConfig,
) -> Bar:
    """Bar for ``order`` placed on the chart span, kept inside [0, chart_px]."""
    left = position(order.start, chart, pixels_per_day, max_offset=max(0.0, chart_px - pixels_per_day))
    bar_w = min(width(order.start, order.end, pixels_per_day, pixels_per_day), chart_px - left)
    return Bar(
        order_id=order.order_id,
        row=row,
        left=left,
        width=bar_w,
        top=row * config.row_height + config.bar_padding,
        height=config.row_height - 2 * config.bar_padding,
        fill_color=status_color(order.status),
        accent_color=priority_color(order.priority),
        label=order.order_number if bar_w > config.label_min_width else None,
        tooltip=build_tooltip(order),
    )


def assemble(
    orders: Sequence[Order],
    window: Window,
    granularity: str,
    pixels_per_day: float,
    *,
    today: datetime | None = None,
    config: TimelineConfig | None = None,
) -> TimelineLayout:
    config = config or TimelineConfig()
    segments = generate_labels(window, granularity, pixels_per_day)
    total_width = chart_width(segments)
    chart = chart_window(window, segments, pixels_per_day)

    bars: dict[str, Bar] = {}
    for row, order in enumerate(orders):
        bars[order.order_id] = build_bar(
            order,
            row,
            chart=chart,
            pixels_per_day=pixels_per_day,
            chart_px=total_width,
            config=config,
        )

    return TimelineLayout(
        window=window,
        granularity=granularity,
        pixels_per_day=float(pixels_per_day),
        segments=segments,
        chart_width=total_width,
        chart_height=len(orders) * config.row_height,
        bars=bars,
        rows=tuple(orders),
        day_columns=day_columns(chart, pixels_per_day, today=today),
        today_offset=(
            today_offset(today, window, pixels_per_day, origin=chart.start) if today is not None else None
        ),
    )
