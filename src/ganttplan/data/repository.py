from __future__ import annotations

import logging
from dataclasses import fields
from datetime import datetime

from ganttplan.core.models import GRANULARITIES, FilterState, Order, TimelineConfig
from ganttplan.data.db import Db
from ganttplan.data.excel_io import clean_str, coerce_datetime, coerce_int, normalize_columns, read_table_bytes

logger = logging.getLogger(__name__)

DEFAULT_FETCH_LIMIT = 50

# app_config key -> TimelineConfig field
TIMELINE_CONFIG_KEYS: dict[str, str] = {
    "timeline_min_pixels_per_day": "min_pixels_per_day",
    "timeline_max_pixels_per_day": "max_pixels_per_day",
    "timeline_zoom_step": "zoom_step",
    "timeline_week_pixels_per_day": "week_pixels_per_day",
    "timeline_month_pixels_per_day": "month_pixels_per_day",
    "timeline_quarter_pixels_per_day": "quarter_pixels_per_day",
    "timeline_margin_days": "margin_days",
    "timeline_fetch_limit": "fetch_limit",
    "timeline_label_min_width": "label_min_width",
    "timeline_default_granularity": "default_granularity",
    "timeline_default_status": "default_status_filter",
}

IMPORT_REQUIRED_COLUMNS = {
    "no",
    "description",
    "sourceno",
    "quantity",
    "startingdatetime",
    "endingdatetime",
    "status",
}
IMPORT_KNOWN_STATUSES = {"Released", "Finished", "In Progress", "Planned"}

_ORDER_COLUMNS = (
    "order_id, order_number, description, part_no, status, priority, "
    "start_at, end_at, customer, quantity, notes"
)


def priority_from_state(state: str | None) -> str:
    s = str(state or "").strip().upper()
    if s == "URGENT":
        return "High"
    if s == "HIGH":
        return "Medium-High"
    return "Medium"


def _iso(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


class Repository:
    def __init__(self, db: Db):
        self.db = db

    # ---------- Config ----------
    def get_config(self, *, key: str, default: str | None = None) -> str | None:
        key = str(key).strip()
        if not key:
            raise ValueError("empty config key")
        with self.db.connect() as con:
            row = con.execute("SELECT value FROM app_config WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        return str(row[0])

    def set_config(self, *, key: str, value: str) -> None:
        key = str(key).strip()
        if not key:
            raise ValueError("empty config key")
        with self.db.connect() as con:
            con.execute(
                "INSERT INTO app_config(key, value) VALUES(?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, str(value).strip()),
            )

    def get_timeline_config(self) -> TimelineConfig:
        """Build TimelineConfig from app_config; bad values fall back to defaults."""
        defaults = TimelineConfig()
        types = {f.name: type(getattr(defaults, f.name)) for f in fields(TimelineConfig)}
        values: dict[str, object] = {}

        for key, attr in TIMELINE_CONFIG_KEYS.items():
            raw = self.get_config(key=key, default=None)
            if raw is None:
                continue
            raw = raw.strip()
            if attr == "default_granularity":
                if raw in GRANULARITIES:
                    values[attr] = raw
                else:
                    logger.warning("Config %s=%r is not a granularity; using %r", key, raw, defaults.default_granularity)
                continue
            if attr == "default_status_filter":
                values[attr] = raw or None
                continue
            try:
                num = float(raw)
                if types[attr] is int:
                    num = int(num)
                if num <= 0:
                    raise ValueError("must be positive")
            except ValueError:
                logger.warning("Config %s=%r is invalid; using %r", key, raw, getattr(defaults, attr))
                continue
            values[attr] = num

        lo = float(values.get("min_pixels_per_day", defaults.min_pixels_per_day))
        hi = float(values.get("max_pixels_per_day", defaults.max_pixels_per_day))
        if lo > hi:
            logger.warning("Zoom bounds inverted (%s > %s); swapping", lo, hi)
            values["min_pixels_per_day"], values["max_pixels_per_day"] = hi, lo

        return TimelineConfig(**values)

    # ---------- Orders ----------
    @staticmethod
    def _order_from_row(row) -> Order:
        return Order(
            order_id=str(row["order_id"]),
            order_number=str(row["order_number"]),
            description=str(row["description"] or ""),
            part_no=str(row["part_no"] or ""),
            status=str(row["status"]),
            priority=(str(row["priority"]) if row["priority"] else None),
            start=datetime.fromisoformat(str(row["start_at"])),
            end=datetime.fromisoformat(str(row["end_at"])),
            customer=row["customer"],
            quantity=(int(row["quantity"]) if row["quantity"] is not None else None),
            notes=row["notes"],
        )

    def upsert_order(self, order: Order, *, state: str | None = None) -> None:
        self.upsert_orders([order], states={order.order_id: state} if state else None)

    def upsert_orders(self, orders: list[Order], *, states: dict[str, str | None] | None = None) -> int:
        states = states or {}
        now = _iso(datetime.now())
        rows = []
        for o in orders:
            if not str(o.order_id).strip():
                raise ValueError("order without identifier")
            rows.append(
                (
                    o.order_id,
                    o.order_number,
                    o.description,
                    o.part_no,
                    o.status,
                    o.priority,
                    _iso(o.start),
                    _iso(o.end),
                    o.customer,
                    o.quantity,
                    o.notes,
                    states.get(o.order_id),
                    now,
                )
            )
        with self.db.connect() as con:
            con.executemany(
                """
                INSERT INTO orders(
                    order_id, order_number, description, part_no, status, priority,
                    start_at, end_at, customer, quantity, notes, state, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(order_id) DO UPDATE SET
                    order_number=excluded.order_number,
                    description=excluded.description,
                    part_no=excluded.part_no,
                    status=excluded.status,
                    priority=excluded.priority,
                    start_at=excluded.start_at,
                    end_at=excluded.end_at,
                    customer=excluded.customer,
                    quantity=excluded.quantity,
                    notes=excluded.notes,
                    state=excluded.state,
                    updated_at=excluded.updated_at
                """,
                rows,
            )
        return len(rows)

    def delete_order(self, *, order_id: str) -> None:
        with self.db.connect() as con:
            con.execute("DELETE FROM orders WHERE order_id = ?", (str(order_id),))

    def delete_all_orders(self) -> None:
        with self.db.connect() as con:
            con.execute("DELETE FROM orders")

    def count_orders(self) -> int:
        with self.db.connect() as con:
            return int(con.execute("SELECT COUNT(*) FROM orders").fetchone()[0])

    def get_order(self, *, order_id: str) -> Order | None:
        with self.db.connect() as con:
            row = con.execute(
                f"SELECT {_ORDER_COLUMNS} FROM orders WHERE order_id = ?",
                (str(order_id),),
            ).fetchone()
        return self._order_from_row(row) if row is not None else None

    def fetch_orders(
        self,
        *,
        status: str | None = None,
        priority: str | None = None,
        limit: int = DEFAULT_FETCH_LIMIT,
    ) -> list[Order]:
        """Orders matching the exact status/priority filters, by end ascending.

        A missing priority counts as "Medium".
        """
        where: list[str] = []
        params: list[object] = []
        if status:
            where.append("status = ?")
            params.append(str(status))
        if priority:
            where.append("COALESCE(NULLIF(TRIM(priority), ''), 'Medium') = ?")
            params.append(str(priority))
        sql = f"SELECT {_ORDER_COLUMNS} FROM orders"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY end_at ASC, order_id ASC LIMIT ?"
        params.append(max(0, int(limit)))

        with self.db.connect() as con:
            rows = con.execute(sql, params).fetchall()
        return [self._order_from_row(r) for r in rows]

    def fetch_orders_for(self, filters: FilterState, *, limit: int = DEFAULT_FETCH_LIMIT) -> list[Order]:
        return self.fetch_orders(status=filters.status, priority=filters.priority, limit=limit)

    def get_orders_rows(self, *, limit: int = 500) -> list[dict]:
        with self.db.connect() as con:
            rows = con.execute(
                f"SELECT {_ORDER_COLUMNS}, state, updated_at FROM orders ORDER BY end_at ASC LIMIT ?",
                (int(limit),),
            ).fetchall()
        return [dict(r) for r in rows]

    def list_statuses(self) -> list[str]:
        with self.db.connect() as con:
            rows = con.execute("SELECT DISTINCT status FROM orders ORDER BY status").fetchall()
        return [str(r[0]) for r in rows]

    # ---------- Import ----------
    def import_orders_bytes(self, *, content: bytes, filename: str = "") -> dict:
        """Import orders from an .xlsx/.csv export.

        Returns {"imported": n, "errors": [...], "warnings": [...]}, each issue
        being {"row": n, "field": name, "message": text}. Rows with errors are
        skipped; the rest are upserted by order number.
        """
        df = normalize_columns(read_table_bytes(content, filename=filename))
        missing = sorted(IMPORT_REQUIRED_COLUMNS - set(df.columns))
        if missing:
            raise ValueError(f"Missing columns: {missing}. Detected columns: {sorted(df.columns)}")

        errors: list[dict] = []
        warnings: list[dict] = []
        parsed: dict[str, tuple[Order, str | None]] = {}
        seen: set[str] = set()

        for idx, rec in enumerate(df.to_dict(orient="records"), start=1):
            row_errors: list[dict] = []

            def _err(field: str, message: str) -> None:
                row_errors.append({"row": idx, "field": field, "message": message})

            number = clean_str(rec.get("no"))
            status = clean_str(rec.get("status"))
            for field, key in (("No", "no"), ("Description", "description"), ("SourceNo", "sourceno"), ("Status", "status")):
                if clean_str(rec.get(key)) is None:
                    _err(field, f"Missing {field}")

            start = end = None
            for field, key in (("StartingDateTime", "startingdatetime"), ("EndingDateTime", "endingdatetime")):
                try:
                    value = coerce_datetime(rec.get(key), field=field)
                except ValueError as ex:
                    _err(field, str(ex))
                    continue
                if key == "startingdatetime":
                    start = value
                else:
                    end = value

            quantity = None
            try:
                quantity = coerce_int(rec.get("quantity"), field="Quantity")
            except ValueError as ex:
                _err("Quantity", str(ex))

            if row_errors:
                errors.extend(row_errors)
                continue

            if status not in IMPORT_KNOWN_STATUSES:
                warnings.append(
                    {
                        "row": idx,
                        "field": "Status",
                        "message": f"Unexpected status {status!r}. Expected: {', '.join(sorted(IMPORT_KNOWN_STATUSES))}",
                    }
                )
            if end < start:
                warnings.append({"row": idx, "field": "EndingDateTime", "message": "End before start"})
            if number in seen:
                warnings.append({"row": idx, "field": "No", "message": f"Duplicate order number: {number}"})
            seen.add(number)

            state = clean_str(rec.get("state"))
            parsed[number] = (
                Order(
                    order_id=number,
                    order_number=number,
                    description=clean_str(rec.get("description")) or "",
                    part_no=clean_str(rec.get("sourceno")) or "",
                    status=status,
                    priority=priority_from_state(state),
                    start=start,
                    end=end,
                    customer=clean_str(rec.get("customer")),
                    quantity=quantity,
                    notes=clean_str(rec.get("notes")),
                ),
                state,
            )

        imported = 0
        if parsed:
            imported = self.upsert_orders(
                [o for o, _ in parsed.values()],
                states={o.order_id: s for o, s in parsed.values()},
            )
        logger.info(
            "Imported %d orders from %s (%d errors, %d warnings)",
            imported,
            filename or "upload",
            len(errors),
            len(warnings),
        )
        return {"imported": imported, "errors": errors, "warnings": warnings}
