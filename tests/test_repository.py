from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from ganttplan.core.models import FilterState, Order, TimelineConfig
from ganttplan.data.db import Db
from ganttplan.data.repository import Repository


@pytest.fixture()
def repo(tmp_path) -> Repository:
    db = Db(Path(tmp_path) / "test.db")
    db.ensure_schema()
    return Repository(db)


def _order(order_id: str, end_day: int, *, status: str = "Released", priority: str | None = None) -> Order:
    end = datetime(2025, 5, 1) + timedelta(days=end_day)
    return Order(
        order_id=order_id,
        order_number=f"WO-{order_id}",
        description="Housing",
        part_no="P-10",
        status=status,
        start=end - timedelta(days=3),
        end=end,
        priority=priority,
    )


def test_schema_seeds_timeline_defaults(repo):
    assert repo.get_config(key="timeline_default_granularity") == "month"
    assert repo.get_config(key="timeline_default_status") == "Released"
    assert repo.get_config(key="missing", default="x") == "x"


def test_ensure_schema_is_idempotent(tmp_path):
    db = Db(Path(tmp_path) / "again.db")
    db.ensure_schema()
    db.ensure_schema()
    with db.connect() as con:
        cols = [r[1] for r in con.execute("PRAGMA table_info(orders)").fetchall()]
    assert "state" in cols


def test_empty_config_key_rejected(repo):
    with pytest.raises(ValueError):
        repo.set_config(key="  ", value="1")


def test_fetch_orders_by_end_ascending(repo):
    repo.upsert_orders([_order("c", 9), _order("a", 1), _order("b", 5)])
    assert [o.order_id for o in repo.fetch_orders()] == ["a", "b", "c"]


def test_fetch_orders_is_limited(repo):
    repo.upsert_orders([_order(f"{i:03d}", i) for i in range(60)])
    orders = repo.fetch_orders()
    assert len(orders) == 50
    assert orders[0].order_id == "000"
    assert orders[-1].order_id == "049"
    assert len(repo.fetch_orders(limit=5)) == 5


def test_fetch_orders_status_filter_is_exact(repo):
    repo.upsert_orders(
        [
            _order("a", 1, status="Released"),
            _order("b", 2, status="In Progress"),
            _order("c", 3, status="Released "),
        ]
    )
    assert [o.order_id for o in repo.fetch_orders(status="Released")] == ["a"]
    assert [o.order_id for o in repo.fetch_orders(status="In Progress")] == ["b"]


def test_fetch_orders_priority_filter_counts_missing_as_medium(repo):
    repo.upsert_orders(
        [
            _order("a", 1, priority="High"),
            _order("b", 2, priority=None),
            _order("c", 3, priority="Medium"),
        ]
    )
    assert [o.order_id for o in repo.fetch_orders(priority="Medium")] == ["b", "c"]
    assert [o.order_id for o in repo.fetch_orders(priority="High")] == ["a"]


def test_fetch_orders_for_filter_state(repo):
    repo.upsert_orders([_order("a", 1, status="Done", priority="Low"), _order("b", 2, status="Done")])
    got = repo.fetch_orders_for(FilterState(status="Done", priority="Low"))
    assert [o.order_id for o in got] == ["a"]


def test_order_round_trip_and_upsert(repo):
    order = Order(
        order_id="WO-1",
        order_number="WO-1",
        description="Gear",
        part_no="G-2",
        status="Released",
        start=datetime(2025, 5, 10, 8, 30),
        end=datetime(2025, 5, 12, 17, 0),
        priority="Critical",
        customer="ACME",
        quantity=12,
        notes="rush",
    )
    repo.upsert_order(order)
    assert repo.get_order(order_id="WO-1") == order

    repo.upsert_order(replace(order, status="Done"))
    assert repo.count_orders() == 1
    assert repo.get_order(order_id="WO-1").status == "Done"

    repo.delete_order(order_id="WO-1")
    assert repo.get_order(order_id="WO-1") is None


def test_list_statuses_and_delete_all(repo):
    repo.upsert_orders([_order("a", 1, status="Released"), _order("b", 2, status="Done")])
    assert repo.list_statuses() == ["Done", "Released"]
    repo.delete_all_orders()
    assert repo.count_orders() == 0


def test_timeline_config_defaults(repo):
    assert repo.get_timeline_config() == TimelineConfig()


def test_timeline_config_overrides(repo):
    repo.set_config(key="timeline_week_pixels_per_day", value="50")
    repo.set_config(key="timeline_margin_days", value="14")
    repo.set_config(key="timeline_default_granularity", value="week")
    repo.set_config(key="timeline_default_status", value="")

    cfg = repo.get_timeline_config()
    assert cfg.week_pixels_per_day == 50
    assert cfg.margin_days == 14
    assert cfg.default_granularity == "week"
    assert cfg.default_status_filter is None


def test_timeline_config_invalid_values_fall_back(repo):
    repo.set_config(key="timeline_zoom_step", value="abc")
    repo.set_config(key="timeline_fetch_limit", value="-3")
    repo.set_config(key="timeline_default_granularity", value="year")

    cfg = repo.get_timeline_config()
    assert cfg.zoom_step == 5
    assert cfg.fetch_limit == 50
    assert cfg.default_granularity == "month"


def test_timeline_config_inverted_bounds_are_swapped(repo):
    repo.set_config(key="timeline_min_pixels_per_day", value="90")
    repo.set_config(key="timeline_max_pixels_per_day", value="20")

    cfg = repo.get_timeline_config()
    assert cfg.min_pixels_per_day == 20
    assert cfg.max_pixels_per_day == 90
