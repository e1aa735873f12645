from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from nicegui import app, ui

from ganttplan.data.db import Db
from ganttplan.data.repository import Repository
from ganttplan.logging_conf import configure_logging
from ganttplan.settings import Settings, default_db_path
from ganttplan.ui.pages import register_pages

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Order Timeline")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--db", type=Path, default=None, help="Path to the sqlite database")
    parser.add_argument("--title", type=str, default="Order Timeline")
    parser.add_argument("--log-level", type=str, default="INFO")
    return parser


def build_settings(argv: list[str] | None = None) -> Settings:
    args = build_arg_parser().parse_args(argv)
    return Settings(
        db_path=args.db or default_db_path(),
        host=args.host,
        port=args.port,
        title=args.title,
        log_level=args.log_level,
    )


def main(argv: list[str] | None = None) -> None:
    settings = build_settings(argv)
    configure_logging(settings.log_level)

    db = Db(settings.db_path)
    db.ensure_schema()
    logger.info("Using database %s", settings.db_path)

    repo = Repository(db)
    register_pages(repo)

    assets_dir = Path(__file__).resolve().parents[2] / "assets"
    if assets_dir.exists():
        app.add_static_files("/assets", str(assets_dir))

    if sys.platform == "win32":
        @app.on_startup
        async def _silence_windows_connection_reset() -> None:
            loop = asyncio.get_running_loop()

            def _handler(loop: asyncio.AbstractEventLoop, context: dict) -> None:
                exc = context.get("exception")
                if isinstance(exc, ConnectionResetError) and getattr(exc, "winerror", None) == 10054:
                    return
                loop.default_exception_handler(context)

            loop.set_exception_handler(_handler)

    ui.run(host=settings.host, port=settings.port, title=settings.title, reload=False)


if __name__ in {"__main__", "__mp_main__"}:
    main()
