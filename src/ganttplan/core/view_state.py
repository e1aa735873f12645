"""View-state controller and fetch bookkeeping.

``ViewState`` owns zoom (pixels per day), granularity and filters. Every
mutation is synchronous, keeps the state within bounds and notifies listeners;
it never computes geometry itself.

``FetchTracker`` tags each order fetch with the filter snapshot it was issued
for, so a response that completes after a newer filter change is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ganttplan.core.models import GRANULARITIES, FetchTicket, FilterState, Order, TimelineConfig

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]


class ViewState:
    def __init__(self, config: TimelineConfig | None = None, *, filters: FilterState | None = None):
        self.config = config or TimelineConfig()
        g = self.config.default_granularity
        self.granularity: str = g if g in GRANULARITIES else "month"
        self.pixels_per_day: float = self.config.default_pixels_per_day(self.granularity)
        self.filters: FilterState = filters or FilterState(status=self.config.default_status_filter)
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self, reason: str) -> None:
        for listener in list(self._listeners):
            listener(reason)

    def set_granularity(self, granularity: str) -> None:
        """Switch scale and reset zoom to that scale's default.

        Unknown values are ignored.
        """
        if granularity not in GRANULARITIES:
            logger.debug("Ignoring unknown granularity %r", granularity)
            return
        self.granularity = granularity
        self.pixels_per_day = self.config.default_pixels_per_day(granularity)
        self._notify("granularity")

    def zoom(self, delta: float) -> None:
        self.pixels_per_day = self.config.clamp_pixels_per_day(self.pixels_per_day + float(delta))
        self._notify("zoom")

    def zoom_in(self) -> None:
        self.zoom(self.config.zoom_step)

    def zoom_out(self) -> None:
        self.zoom(-self.config.zoom_step)

    def set_filter(self, kind: str, value: str | None) -> bool:
        """Update the status or priority filter.

        Returns True when the filter actually changed; listeners get a
        "filters" notification, which is the cue to re-fetch orders.
        """
        new_filters = self.filters.with_value(kind, value)
        if new_filters == self.filters:
            return False
        self.filters = new_filters
        self._notify("filters")
        return True


class FetchTracker:
    def __init__(self) -> None:
        self._seq = 0
        self._latest: FetchTicket | None = None

    def begin(self, filters: FilterState) -> FetchTicket:
        self._seq += 1
        self._latest = FetchTicket(seq=self._seq, filters=filters)
        return self._latest

    def is_current(self, ticket: FetchTicket) -> bool:
        return self._latest is not None and ticket == self._latest


@dataclass(frozen=True)
class FetchResult:
    ticket: FetchTicket
    orders: tuple[Order, ...] = ()
    error: str | None = None

    @property
    def unavailable(self) -> bool:
        return self.error is not None


async def load_orders(
    tracker: FetchTracker,
    filters: FilterState,
    fetch: Callable[[FilterState], Sequence[Order]],
) -> FetchResult | None:
    """Run ``fetch`` in a worker thread and return its result.

    Returns None when a newer fetch was started meanwhile. Fetch errors are
    reported in the result, never retried.
    """
    ticket = tracker.begin(filters)
    logger.info("Fetching orders (status=%r, priority=%r)", filters.status, filters.priority)
    try:
        orders = await asyncio.to_thread(fetch, filters)
    except Exception as ex:
        if not tracker.is_current(ticket):
            logger.debug("Dropping failed stale fetch #%s", ticket.seq)
            return None
        logger.exception("Order fetch #%s failed", ticket.seq)
        return FetchResult(ticket=ticket, error=str(ex) or ex.__class__.__name__)

    if not tracker.is_current(ticket):
        logger.debug("Dropping stale fetch #%s (%s)", ticket.seq, ticket.filters)
        return None
    logger.info("Fetch #%s returned %d orders", ticket.seq, len(orders))
    return FetchResult(ticket=ticket, orders=tuple(orders))
