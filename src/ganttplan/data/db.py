from __future__ import annotations

import sqlite3
from pathlib import Path


class Db:
    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self.path)
        con.row_factory = sqlite3.Row
        return con

    def ensure_schema(self) -> None:
        with self.connect() as con:
            con.execute("PRAGMA journal_mode=WAL;")

            con.executescript(
                """
                CREATE TABLE IF NOT EXISTS app_config (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS orders (
                    order_id TEXT PRIMARY KEY,
                    order_number TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    part_no TEXT NOT NULL DEFAULT '',
                    status TEXT NOT NULL,
                    priority TEXT,
                    start_at TEXT NOT NULL,
                    end_at TEXT NOT NULL,
                    customer TEXT,
                    quantity INTEGER,
                    notes TEXT,
                    updated_at TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_orders_end ON orders(end_at);
                CREATE INDEX IF NOT EXISTS idx_orders_status_end ON orders(status, end_at);
                """
            )

            # orders v2: optional import state (URGENT/HIGH) kept for reference
            cols = [r[1] for r in con.execute("PRAGMA table_info(orders)").fetchall()]
            if "state" not in cols:
                con.execute("ALTER TABLE orders ADD COLUMN state TEXT")

            # Seed default timeline config values if missing.
            con.execute("INSERT OR IGNORE INTO app_config(key, value) VALUES('timeline_default_granularity', 'month')")
            con.execute("INSERT OR IGNORE INTO app_config(key, value) VALUES('timeline_default_status', 'Released')")
