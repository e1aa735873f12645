from __future__ import annotations

import asyncio
import logging

from nicegui import ui

from ganttplan.core.geometry import scroll_target
from ganttplan.core.layout import PRIORITY_FILTER_OPTIONS, status_filter_options
from ganttplan.core.session import TimelineSession
from ganttplan.data.repository import Repository
from ganttplan.ui.widgets import page_container, render_nav, render_order_details, render_timeline

logger = logging.getLogger(__name__)


def register_pages(repo: Repository) -> None:
    def open_order_details(order_id: str) -> None:
        try:
            order = repo.get_order(order_id=order_id)
        except Exception as ex:
            logger.exception("Could not read order %s", order_id)
            ui.notify(f"Could not read order: {ex}", color="negative")
            return
        if order is None:
            ui.notify(f"Order {order_id} not found", color="warning")
            return

        dialog = ui.dialog()
        with dialog:
            with ui.card().classes("bg-white p-6").style("width: 92vw; max-width: 640px"):
                render_order_details(order)
                with ui.row().classes("w-full justify-end"):
                    ui.button("Close", on_click=dialog.close).props("flat")
        dialog.open()

    @ui.page("/")
    def timeline() -> None:
        render_nav(active="timeline")
        config = repo.get_timeline_config()
        session = TimelineSession(config)

        def fetch(filters):
            return repo.fetch_orders_for(filters, limit=config.fetch_limit)

        status_options = status_filter_options([*repo.list_statuses(), session.view.filters.status or ""])

        with page_container():
            with ui.row().classes("w-full items-center justify-between mb-2"):
                ui.label("Order Timeline").classes("text-2xl font-semibold")

                with ui.row().classes("items-center gap-3"):
                    ui.select(
                        {o["value"]: o["label"] for o in status_options},
                        value=session.view.filters.status or "",
                        label="Status",
                        on_change=lambda e: session.view.set_filter("status", e.value),
                    ).props("dense outlined").classes("w-40")
                    ui.select(
                        {o["value"]: o["label"] for o in PRIORITY_FILTER_OPTIONS},
                        value=session.view.filters.priority or "",
                        label="Priority",
                        on_change=lambda e: session.view.set_filter("priority", e.value),
                    ).props("dense outlined").classes("w-40")
                    ui.toggle(
                        {"week": "Week", "month": "Month", "quarter": "Quarter"},
                        value=session.view.granularity,
                        on_change=lambda e: session.view.set_granularity(e.value),
                    ).props("dense no-caps")
                    ui.button(icon="zoom_in", on_click=session.view.zoom_in).props("flat dense round").tooltip("Zoom In")
                    ui.button(icon="zoom_out", on_click=session.view.zoom_out).props("flat dense round").tooltip(
                        "Zoom Out"
                    )
                    ui.button(icon="today", on_click=lambda: go_to_today()).props("flat dense round").tooltip(
                        "Go to Today"
                    )

            content = ui.element("div").classes("w-full")

        def render() -> None:
            content.clear()
            with content:
                if session.loading and not session.orders:
                    with ui.row().classes("w-full justify-center p-10"):
                        ui.spinner(size="lg")
                    return
                if session.unavailable:
                    ui.label(f"Failed to load orders: {session.error}").classes(
                        "w-full p-3 rounded bg-red-50 text-red-700"
                    )
                    return
                layout = session.layout()
                if not layout.rows:
                    ui.label("No orders for the selected filters.").classes("text-sm text-slate-500 mb-2")
                render_timeline(layout, on_open=open_order_details, row_height=config.row_height)

        async def reload_orders() -> None:
            session.loading = True
            render()
            if await session.refresh(fetch):
                render()

        async def go_to_today() -> None:
            session.jump_to_today()
            render()
            layout = session.layout()
            try:
                viewport = await ui.run_javascript(
                    "return document.querySelector('.gp-timeline')?.clientWidth || 0", timeout=2.0
                )
            except TimeoutError:
                viewport = 0
            target = scroll_target(layout.today_offset, float(viewport or 0))
            ui.run_javascript(f"const el = document.querySelector('.gp-timeline'); if (el) el.scrollLeft = {target};")

        def on_view_change(reason: str) -> None:
            if reason == "filters":
                asyncio.create_task(reload_orders())
            else:
                render()

        session.view.subscribe(on_view_change)
        ui.timer(0.1, reload_orders, once=True)

    @ui.page("/import")
    def import_orders() -> None:
        render_nav(active="import")
        with page_container():
            ui.label("Import orders").classes("text-2xl font-semibold")
            ui.label(
                "Upload an .xlsx or .csv export with columns No, Description, SourceNo, Quantity, "
                "StartingDateTime, EndingDateTime, Status (optional: Notes, State, Customer). "
                "Dates as DD-MM-YYYY."
            ).classes("gp-subtitle")
            ui.separator()

            report_box = ui.element("div").classes("w-full")

            def orders_rows() -> list[dict]:
                return repo.get_orders_rows(limit=500)

            def show_report(report: dict) -> None:
                report_box.clear()
                with report_box:
                    ui.label(
                        f"Imported: {report['imported']} · Errors: {len(report['errors'])} · "
                        f"Warnings: {len(report['warnings'])}"
                    ).classes("text-lg font-semibold")
                    issues = [dict(r, kind="error") for r in report["errors"]] + [
                        dict(r, kind="warning") for r in report["warnings"]
                    ]
                    if issues:
                        ui.table(
                            columns=[
                                {"name": "kind", "label": "", "field": "kind"},
                                {"name": "row", "label": "Row", "field": "row"},
                                {"name": "field", "label": "Field", "field": "field"},
                                {"name": "message", "label": "Message", "field": "message"},
                            ],
                            rows=issues,
                        ).classes("w-full").props("dense flat bordered")

            async def handle_upload(e):
                try:
                    content = await e.file.read()
                    filename = getattr(e.file, "name", None) or getattr(e.file, "filename", None) or ""
                    report = await asyncio.to_thread(
                        lambda: repo.import_orders_bytes(content=content, filename=filename)
                    )
                except Exception as ex:
                    logger.exception("Order import failed")
                    ui.notify(f"Import failed: {ex}", color="negative")
                    return
                ui.notify(f"Imported {report['imported']} orders")
                show_report(report)
                tbl.rows = orders_rows()
                tbl.update()

            ui.upload(on_upload=handle_upload, auto_upload=True, label="Orders file").props(
                "accept=.xlsx,.csv"
            ).classes("w-96")

            def clear_all() -> None:
                repo.delete_all_orders()
                tbl.rows = orders_rows()
                tbl.update()
                ui.notify("All orders deleted")

            with ui.row().classes("w-full items-center justify-between mt-4"):
                ui.label(f"Orders ({repo.count_orders()})").classes("text-lg font-semibold")
                ui.button("Delete all", icon="delete", on_click=clear_all).props("flat color=negative no-caps")

            tbl = ui.table(
                columns=[
                    {"name": "order_number", "label": "No", "field": "order_number"},
                    {"name": "description", "label": "Description", "field": "description"},
                    {"name": "part_no", "label": "Part", "field": "part_no"},
                    {"name": "status", "label": "Status", "field": "status"},
                    {"name": "priority", "label": "Priority", "field": "priority"},
                    {"name": "start_at", "label": "Start", "field": "start_at"},
                    {"name": "end_at", "label": "End", "field": "end_at"},
                ],
                rows=orders_rows(),
                row_key="order_id",
                pagination=25,
            ).classes("w-full").props("dense flat bordered")
            tbl.on("rowClick", lambda e: open_order_details(str(e.args[1].get("order_id", ""))))
