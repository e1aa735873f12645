from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from ganttplan.core.date_range import DateRangeTracker
from ganttplan.core.layout import assemble
from ganttplan.core.models import FilterState, Order, TimelineConfig, TimelineLayout
from ganttplan.core.view_state import FetchResult, FetchTracker, ViewState, load_orders

logger = logging.getLogger(__name__)


class TimelineSession:
    """Per-page timeline state: view parameters, visible window and loaded orders.

    The layout is never cached; ``layout()`` recomputes it from the current
    inputs every time.
    """

    def __init__(self, config: TimelineConfig | None = None, *, clock: Callable[[], datetime] = datetime.now):
        self.config = config or TimelineConfig()
        self.clock = clock
        self.view = ViewState(self.config)
        self.range = DateRangeTracker(clock=clock, margin_days=self.config.margin_days)
        self.fetches = FetchTracker()
        self.orders: tuple[Order, ...] = ()
        self.error: str | None = None
        self.loading = False

    @property
    def unavailable(self) -> bool:
        return self.error is not None

    def apply(self, result: FetchResult | None) -> bool:
        """Apply a completed fetch. Returns False for dropped (stale) results."""
        if result is None:
            return False
        self.loading = False
        if result.unavailable:
            self.error = result.error
            self.orders = ()
            return True
        self.error = None
        self.orders = result.orders
        self.range.on_orders_loaded(self.orders)
        return True

    async def refresh(self, fetch: Callable[[FilterState], Sequence[Order]]) -> bool:
        self.loading = True
        result = await load_orders(self.fetches, self.view.filters, fetch)
        return self.apply(result)

    def jump_to_today(self) -> None:
        self.range.jump_to_today()

    def layout(self) -> TimelineLayout:
        return assemble(
            self.orders,
            self.range.window,
            self.view.granularity,
            self.view.pixels_per_day,
            today=self.clock(),
            config=self.config,
        )
