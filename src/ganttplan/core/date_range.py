"""Visible window tracking.

The tracker owns the visible window. It only widens the window to enclose the
orders of a data refresh (plus a margin) or resets it around "today".
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from ganttplan.core.models import Order, Window

logger = logging.getLogger(__name__)

TODAY_LEAD_DAYS = 7
TODAY_TRAIL_DAYS = 60


def expand(current: Window, orders: Iterable[Order], margin_days: int = 7) -> Window:
    """Return the window enclosing ``current`` and all ``orders`` padded by ``margin_days``.

    - Empty ``orders`` -> ``current`` unchanged.
    - A window that already holds every order with its margin is returned as is,
      so feeding a result back in with the same orders is a no-op.
    - Otherwise both edges get the margin: [earliest - m, latest + m).
    """
    orders = list(orders)
    if not orders:
        return current

    margin = timedelta(days=max(0, int(margin_days)))
    first_start = min(o.start for o in orders)
    last_end = max(max(o.end, o.start) for o in orders)

    if current.start <= first_start - margin and current.end >= last_end + margin:
        return current

    earliest = min(current.start, first_start)
    latest = max(current.end, last_end)
    return Window(start=earliest - margin, end=latest + margin)


def window_around(today: datetime) -> Window:
    return Window(
        start=today - timedelta(days=TODAY_LEAD_DAYS),
        end=today + timedelta(days=TODAY_TRAIL_DAYS),
    )


class DateRangeTracker:
    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = datetime.now,
        margin_days: int = 7,
        window: Window | None = None,
    ):
        self.clock = clock
        self.margin_days = int(margin_days)
        self.window = window or window_around(self.clock())

    def jump_to_today(self) -> Window:
        # Discards any previous expansion.
        self.window = window_around(self.clock())
        return self.window

    def on_orders_loaded(self, orders: Iterable[Order]) -> Window:
        before = self.window
        self.window = expand(before, orders, self.margin_days)
        if self.window != before:
            logger.debug("Visible window expanded to %s -> %s", self.window.start, self.window.end)
        return self.window
