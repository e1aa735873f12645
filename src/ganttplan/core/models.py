from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Literal

Granularity = Literal["week", "month", "quarter"]
GRANULARITIES: tuple[str, ...] = ("week", "month", "quarter")

PRIORITIES: tuple[str, ...] = ("Critical", "High", "Medium-High", "Medium", "Low")
DEFAULT_PRIORITY = "Medium"


@dataclass(frozen=True)
class Order:
    order_id: str
    order_number: str
    description: str
    part_no: str
    status: str
    start: datetime
    end: datetime
    priority: str | None = None
    customer: str | None = None
    quantity: int | None = None
    notes: str | None = None

    @property
    def effective_priority(self) -> str:
        return self.priority or DEFAULT_PRIORITY


@dataclass(frozen=True)
class Window:
    """Half-open visible interval [start, end)."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if not self.start < self.end:
            raise ValueError(f"invalid window: {self.start!r} >= {self.end!r}")

    @property
    def days(self) -> float:
        return (self.end - self.start) / timedelta(days=1)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


@dataclass(frozen=True)
class DayTick:
    day: int
    offset: float


@dataclass(frozen=True)
class LabelSegment:
    start: datetime
    label: str
    width: float
    offset: float = 0.0
    ticks: tuple[DayTick, ...] = ()


@dataclass(frozen=True)
class DayColumn:
    day: datetime
    offset: float
    width: float
    is_weekend: bool
    is_today: bool = False


@dataclass(frozen=True)
class Tooltip:
    order_id: str
    order_number: str
    part_no: str
    description: str
    status: str
    priority: str | None
    start: str
    end: str


@dataclass(frozen=True)
class Bar:
    order_id: str
    row: int
    left: float
    width: float
    top: float
    height: float
    fill_color: str
    accent_color: str
    label: str | None
    tooltip: Tooltip


@dataclass(frozen=True)
class FilterState:
    status: str | None = None
    priority: str | None = None

    def with_value(self, kind: str, value: str | None) -> FilterState:
        value = (str(value).strip() or None) if value is not None else None
        if kind == "status":
            return FilterState(status=value, priority=self.priority)
        if kind == "priority":
            return FilterState(status=self.status, priority=value)
        raise ValueError(f"unsupported filter: {kind!r}")


@dataclass(frozen=True)
class TimelineConfig:
    min_pixels_per_day: float = 10.0
    max_pixels_per_day: float = 100.0
    zoom_step: float = 5.0
    week_pixels_per_day: float = 40.0
    month_pixels_per_day: float = 25.0
    quarter_pixels_per_day: float = 15.0
    margin_days: int = 7
    fetch_limit: int = 50
    label_min_width: float = 80.0
    default_granularity: str = "month"
    default_status_filter: str | None = "Released"
    row_height: float = 40.0
    bar_padding: float = 5.0

    def default_pixels_per_day(self, granularity: str) -> float:
        by_scale = {
            "week": self.week_pixels_per_day,
            "month": self.month_pixels_per_day,
            "quarter": self.quarter_pixels_per_day,
        }
        return self.clamp_pixels_per_day(by_scale.get(granularity, self.month_pixels_per_day))

    def clamp_pixels_per_day(self, value: float) -> float:
        return max(self.min_pixels_per_day, min(self.max_pixels_per_day, float(value)))


@dataclass(frozen=True)
class FetchTicket:
    seq: int
    filters: FilterState


@dataclass(frozen=True)
class TimelineLayout:
    window: Window
    granularity: str
    pixels_per_day: float
    segments: tuple[LabelSegment, ...]
    chart_width: float
    chart_height: float
    bars: dict[str, Bar] = field(default_factory=dict)
    rows: tuple[Order, ...] = ()
    day_columns: tuple[DayColumn, ...] = ()
    today_offset: float | None = None
