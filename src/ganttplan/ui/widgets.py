from __future__ import annotations

from collections.abc import Callable
from contextlib import contextmanager

from nicegui import ui

from ganttplan.core.layout import format_date
from ganttplan.core.models import Bar, Order, TimelineLayout

HEADER_HEIGHT = 60
SIDEBAR_WIDTH = 250


def apply_theme() -> None:
    """Page theme plus the timeline styles; CSS is per client, so call it on every page."""
    ui.colors(
        primary="#3f51b5",
        secondary="#19857b",
        positive="#4caf50",
        negative="#f44336",
        warning="#f59e0b",
    )

    ui.add_css(
        """
        body { background: #f8fafc; }
        .gp-container { max-width: 1400px; margin: 0 auto; padding: 16px; }
        .gp-subtitle { color: #475569; }
        .gp-header { border-bottom: 1px solid rgba(15, 23, 42, 0.08); }
        .gp-gantt { display: flex; height: calc(100vh - 300px); min-height: 400px; }
        .gp-sidebar { flex-shrink: 0; border-right: 1px solid #e2e8f0; overflow: hidden; }
        .gp-scroll { flex-grow: 1; overflow: auto; position: relative; }
        .gp-scale { position: sticky; top: 0; z-index: 10; background: white; border-bottom: 1px solid #e2e8f0; }
        .gp-segment { position: absolute; top: 0; height: 100%; border-right: 1px solid #e2e8f0;
                      display: flex; flex-direction: column; justify-content: center; align-items: center; }
        .gp-day { position: absolute; top: 0; bottom: 0; border-right: 1px solid #f1f5f9; }
        .gp-weekend { background: rgba(0, 0, 0, 0.04); }
        .gp-today-col { background: rgba(63, 81, 181, 0.08); }
        .gp-bar { position: absolute; border-radius: 4px; opacity: 0.8; cursor: pointer; overflow: hidden;
                  white-space: nowrap; display: flex; align-items: center; }
        .gp-bar:hover { opacity: 1; z-index: 5; }
        .gp-bar-accent { position: absolute; left: 0; top: 0; bottom: 0; width: 4px;
                         border-top-left-radius: 4px; border-bottom-left-radius: 4px; }
        .gp-bar-label { margin-left: 12px; color: white; font-size: 0.75rem; font-weight: 500;
                        text-shadow: 0 0 2px rgba(0, 0, 0, 0.5); pointer-events: none; }
        .gp-today { position: absolute; top: 0; bottom: 0; width: 2px; background: #f44336; z-index: 20; }
        .gp-row { border-bottom: 1px solid #e2e8f0; display: flex; align-items: center; padding: 0 8px 0 16px; }
        .gp-row:hover { background: #f1f5f9; }
        """
    )


@contextmanager
def page_container():
    with ui.element("div").classes("gp-container"):
        yield


def render_nav(active: str | None = None) -> None:
    apply_theme()
    active_key = active or "timeline"
    sections: list[tuple[str, str, str]] = [
        ("timeline", "Timeline", "/"),
        ("import", "Import", "/import"),
    ]

    with ui.header().classes("gp-header bg-white text-slate-900"):
        with ui.row().classes("w-full items-center justify-between gap-4 px-4 py-2"):
            ui.label("Order Planning").classes("text-xl md:text-2xl font-semibold leading-none")
            with ui.row().classes("items-center gap-1"):
                for key, label, path in sections:
                    props = "dense no-caps color=primary" + (" unelevated" if key == active_key else " flat")
                    ui.button(label, on_click=lambda p=path: ui.navigate.to(p)).props(props)


def _bar_tooltip(bar: Bar) -> None:
    t = bar.tooltip
    with ui.tooltip().classes("text-xs"):
        ui.label(t.order_number).classes("font-semibold text-sm")
        ui.label(f"Part: {t.part_no}")
        ui.label(f"Desc: {t.description}")
        ui.label(f"Status: {t.status}")
        if t.priority:
            ui.label(f"Priority: {t.priority}")
        ui.label(f"Start: {t.start}")
        ui.label(f"End: {t.end}")


def render_timeline(layout: TimelineLayout, *, on_open: Callable[[str], None], row_height: float = 40) -> None:
    """Paint a TimelineLayout: order list on the left, scale + bars on the right."""
    with ui.element("div").classes("gp-gantt w-full"):
        with ui.element("div").classes("gp-sidebar").style(f"width: {SIDEBAR_WIDTH}px"):
            with ui.element("div").classes("gp-row font-semibold").style(f"height: {HEADER_HEIGHT}px"):
                ui.label("Orders").classes("text-sm")
            with ui.element("div").style(f"overflow-y: auto; height: calc(100% - {HEADER_HEIGHT}px)"):
                for order in layout.rows:
                    _render_row(order, on_open=on_open, row_height=row_height)

        with ui.element("div").classes("gp-scroll gp-timeline"):
            with ui.element("div").classes("gp-scale").style(
                f"height: {HEADER_HEIGHT}px; min-width: {layout.chart_width}px"
            ):
                for seg in layout.segments:
                    with ui.element("div").classes("gp-segment").style(
                        f"left: {seg.offset}px; width: {seg.width}px"
                    ):
                        ui.label(seg.label).classes("text-xs font-medium")
                        if seg.ticks:
                            with ui.element("div").classes("relative w-full h-4 mt-1"):
                                for tick in seg.ticks:
                                    ui.label(str(tick.day)).classes("absolute text-slate-500").style(
                                        f"left: {tick.offset}px; font-size: 0.7rem"
                                    )
                if layout.today_offset is not None:
                    ui.element("div").classes("gp-today").style(f"left: {layout.today_offset}px")

            with ui.element("div").classes("relative").style(
                f"min-width: {layout.chart_width}px; height: {layout.chart_height}px"
            ):
                for col in layout.day_columns:
                    classes = "gp-day"
                    if col.is_weekend:
                        classes += " gp-weekend"
                    if col.is_today:
                        classes += " gp-today-col"
                    ui.element("div").classes(classes).style(
                        f"left: {col.offset}px; width: {col.width}px"
                    )

                for bar in layout.bars.values():
                    with ui.element("div").classes("gp-bar").style(
                        f"left: {bar.left}px; top: {bar.top}px; width: {bar.width}px; "
                        f"height: {bar.height}px; background-color: {bar.fill_color}"
                    ).on("click", lambda _e, oid=bar.order_id: on_open(oid)):
                        ui.element("div").classes("gp-bar-accent").style(f"background-color: {bar.accent_color}")
                        if bar.label:
                            ui.label(bar.label).classes("gp-bar-label")
                        _bar_tooltip(bar)

                if layout.today_offset is not None:
                    ui.element("div").classes("gp-today").style(f"left: {layout.today_offset}px")


def _render_row(order: Order, *, on_open: Callable[[str], None], row_height: float) -> None:
    with ui.element("div").classes("gp-row").style(f"height: {row_height}px"):
        with ui.column().classes("gap-0 overflow-hidden w-full"):
            ui.label(order.order_number).classes("text-sm font-medium truncate")
            ui.label(order.description).classes("text-xs text-slate-500 truncate")
        ui.button(icon="visibility", on_click=lambda oid=order.order_id: on_open(oid)).props(
            "flat dense round size=sm"
        ).tooltip("View Details")


def render_order_details(order: Order) -> None:
    """Body of the order-details dialog."""
    ui.label(f"Order {order.order_number}").classes("text-xl font-semibold")
    ui.separator()
    fields = [
        ("Description", order.description),
        ("Part", order.part_no),
        ("Customer", order.customer or ""),
        ("Quantity", "" if order.quantity is None else str(order.quantity)),
        ("Status", order.status),
        ("Priority", order.effective_priority),
        ("Start", format_date(order.start)),
        ("End", format_date(order.end)),
        ("Notes", order.notes or ""),
    ]
    with ui.grid(columns=2).classes("gap-x-6 gap-y-1"):
        for label, value in fields:
            ui.label(label).classes("text-slate-500")
            ui.label(value)
