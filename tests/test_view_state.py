from __future__ import annotations

import asyncio
import threading
from datetime import datetime

import pytest

from ganttplan.core.models import FilterState, Order, TimelineConfig
from ganttplan.core.view_state import FetchTracker, ViewState, load_orders


def _order(order_id: str) -> Order:
    return Order(
        order_id=order_id,
        order_number=order_id,
        description="",
        part_no="P",
        status="Released",
        start=datetime(2025, 5, 1),
        end=datetime(2025, 5, 2),
    )


def test_defaults_follow_config():
    view = ViewState(TimelineConfig())
    assert view.granularity == "month"
    assert view.pixels_per_day == 25
    assert view.filters == FilterState(status="Released")


def test_switching_granularity_resets_zoom_to_scale_default():
    view = ViewState(TimelineConfig())
    view.zoom(30)
    assert view.pixels_per_day == 55

    view.set_granularity("week")
    assert view.granularity == "week"
    assert view.pixels_per_day == 40

    view.set_granularity("quarter")
    assert view.pixels_per_day == 15


def test_unknown_granularity_is_ignored():
    view = ViewState(TimelineConfig())
    seen: list[str] = []
    view.subscribe(seen.append)
    view.set_granularity("year")
    assert view.granularity == "month"
    assert seen == []


@pytest.mark.parametrize("delta", [5, -5, 1000, -1000, 0.5])
def test_zoom_stays_within_bounds(delta):
    config = TimelineConfig(min_pixels_per_day=20, max_pixels_per_day=100)
    view = ViewState(config)
    for _ in range(50):
        view.zoom(delta)
        assert 20 <= view.pixels_per_day <= 100


def test_zoom_does_not_touch_granularity():
    view = ViewState(TimelineConfig())
    view.set_granularity("week")
    view.zoom_in()
    view.zoom_out()
    view.zoom_out()
    assert view.granularity == "week"
    assert view.pixels_per_day == 35


def test_granularity_default_is_clamped_into_bounds():
    config = TimelineConfig(min_pixels_per_day=20, max_pixels_per_day=100)
    view = ViewState(config)
    view.set_granularity("quarter")
    assert view.pixels_per_day == 20


def test_set_filter_notifies_only_on_change():
    view = ViewState(TimelineConfig())
    seen: list[str] = []
    view.subscribe(seen.append)

    assert view.set_filter("priority", "High") is True
    assert view.filters == FilterState(status="Released", priority="High")
    assert view.set_filter("priority", "High") is False
    assert view.set_filter("status", "") is True
    assert view.filters.status is None
    assert seen == ["filters", "filters"]


def test_set_filter_rejects_unknown_kind():
    view = ViewState(TimelineConfig())
    with pytest.raises(ValueError):
        view.set_filter("customer", "ACME")


def test_fetch_tracker_only_latest_ticket_is_current():
    tracker = FetchTracker()
    first = tracker.begin(FilterState(status="Released"))
    second = tracker.begin(FilterState(status="Done"))
    assert not tracker.is_current(first)
    assert tracker.is_current(second)


def test_load_orders_returns_fetched_rows():
    tracker = FetchTracker()
    result = asyncio.run(load_orders(tracker, FilterState(), lambda f: [_order("A"), _order("B")]))
    assert result is not None
    assert [o.order_id for o in result.orders] == ["A", "B"]
    assert not result.unavailable


def test_load_orders_drops_stale_response():
    tracker = FetchTracker()
    gate = threading.Event()

    def slow(filters):
        gate.wait(5)
        return [_order("stale")]

    def fast(filters):
        return [_order("fresh")]

    async def scenario():
        stale_task = asyncio.create_task(load_orders(tracker, FilterState(status="Released"), slow))
        await asyncio.sleep(0)
        fresh = await load_orders(tracker, FilterState(status="Done"), fast)
        gate.set()
        stale = await stale_task
        return stale, fresh

    stale, fresh = asyncio.run(scenario())
    assert stale is None
    assert fresh is not None
    assert [o.order_id for o in fresh.orders] == ["fresh"]
    assert fresh.ticket.filters == FilterState(status="Done")


def test_load_orders_reports_failure_as_unavailable():
    tracker = FetchTracker()

    def broken(filters):
        raise RuntimeError("database is locked")

    result = asyncio.run(load_orders(tracker, FilterState(), broken))
    assert result is not None
    assert result.unavailable
    assert result.error == "database is locked"
    assert result.orders == ()
