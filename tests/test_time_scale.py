from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from ganttplan.core.models import Window
from ganttplan.core.time_scale import chart_width, chart_window, day_columns, days_in_quarter, generate_labels


def test_single_month_window_yields_one_segment():
    window = Window(datetime(2025, 5, 1), datetime(2025, 5, 31))
    segments = generate_labels(window, "month", 25)

    assert len(segments) == 1
    seg = segments[0]
    assert seg.label == "May 2025"
    assert seg.width == 31 * 25 == 775
    assert seg.start == datetime(2025, 5, 1)
    assert seg.offset == 0
    assert [(t.day, t.offset) for t in seg.ticks] == [(1, 0), (10, 225), (20, 475)]


def test_week_segments_start_on_iso_monday():
    window = Window(datetime(2025, 5, 1), datetime(2025, 5, 31))  # May 1st is a Thursday
    segments = generate_labels(window, "week", 40)

    assert [s.label for s in segments] == ["Week 18", "Week 19", "Week 20", "Week 21", "Week 22"]
    assert segments[0].start == datetime(2025, 4, 28)
    assert [s.offset for s in segments] == [0, 280, 560, 840, 1120]
    assert all(s.width == 280 for s in segments)
    assert all(s.ticks == () for s in segments)


def test_quarter_segments():
    window = Window(datetime(2025, 5, 1), datetime(2025, 8, 15))
    segments = generate_labels(window, "quarter", 15)

    assert [s.label for s in segments] == ["Q2 2025", "Q3 2025"]
    assert [s.start for s in segments] == [datetime(2025, 4, 1), datetime(2025, 7, 1)]
    assert [s.width for s in segments] == [91 * 15, 92 * 15]


def test_days_in_quarter_handles_leap_years():
    assert days_in_quarter(datetime(2024, 2, 10)) == 91
    assert days_in_quarter(datetime(2025, 2, 10)) == 90


def test_month_widths_follow_calendar():
    window = Window(datetime(2024, 1, 15), datetime(2024, 3, 10))
    segments = generate_labels(window, "month", 10)

    assert [s.label for s in segments] == ["Jan 2024", "Feb 2024", "Mar 2024"]
    assert [s.width for s in segments] == [310, 290, 310]


@pytest.mark.parametrize("granularity", ["week", "month", "quarter"])
def test_segments_are_contiguous_and_cover_window(granularity):
    window = Window(datetime(2024, 11, 20, 8, 30), datetime(2025, 7, 3, 17, 0))
    ppd = 12.0
    segments = generate_labels(window, granularity, ppd)

    assert segments[0].start <= window.start
    for prev, nxt in zip(segments, segments[1:]):
        assert prev.start + timedelta(days=prev.width / ppd) == nxt.start
    last = segments[-1]
    assert last.start < window.end <= last.start + timedelta(days=last.width / ppd)


def test_generation_terminates_for_long_windows_at_min_zoom():
    window = Window(datetime(2015, 1, 1), datetime(2025, 1, 1))
    segments = generate_labels(window, "week", 10)
    assert 520 <= len(segments) <= 523


def test_unknown_granularity_is_treated_as_month():
    window = Window(datetime(2025, 5, 1), datetime(2025, 5, 31))
    assert generate_labels(window, "decade", 25) == generate_labels(window, "month", 25)


def test_chart_width_is_sum_of_segment_widths():
    window = Window(datetime(2025, 1, 1), datetime(2025, 4, 1))
    segments = generate_labels(window, "month", 20)
    assert chart_width(segments) == (31 + 28 + 31) * 20


def test_generation_is_restartable():
    window = Window(datetime(2025, 1, 1), datetime(2025, 4, 1))
    assert generate_labels(window, "week", 30) == generate_labels(window, "week", 30)


def test_day_columns_flag_weekends_and_today():
    window = Window(datetime(2025, 5, 1), datetime(2025, 5, 8))
    cols = day_columns(window, 20, today=datetime(2025, 5, 2, 15, 0))

    assert len(cols) == 7
    assert [c.offset for c in cols] == [0, 20, 40, 60, 80, 100, 120]
    # May 3/4 2025 are Saturday/Sunday
    assert [c.is_weekend for c in cols] == [False, False, True, True, False, False, False]
    assert [c.is_today for c in cols] == [False, True, False, False, False, False, False]


@pytest.mark.parametrize("granularity", ["week", "month", "quarter"])
def test_segment_offsets_run_from_the_chart_origin(granularity):
    window = Window(datetime(2025, 5, 25), datetime(2025, 9, 10))
    segments = generate_labels(window, granularity, 15)

    assert segments[0].offset == 0
    for prev, nxt in zip(segments, segments[1:]):
        assert nxt.offset == prev.offset + prev.width
    assert chart_width(segments) == segments[-1].offset + segments[-1].width


def test_chart_window_spans_all_segments():
    window = Window(datetime(2025, 5, 25), datetime(2025, 6, 10))
    segments = generate_labels(window, "quarter", 15)
    chart = chart_window(window, segments, 15)

    assert chart == Window(datetime(2025, 4, 1), datetime(2025, 7, 1))
    cols = day_columns(chart, 15)
    assert len(cols) == 91
    assert cols[-1].offset + cols[-1].width == chart_width(segments)
