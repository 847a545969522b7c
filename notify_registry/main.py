"""
Registry command-line entry point.

Loads settings, configures logging and runs one maintenance command:
- init-db: create the schema directly (development; use Alembic in production)
- sweep: delete expired subscription watchers once
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from notify_registry.core.config import get_settings
from notify_registry.core.database import init_db, make_engine
from notify_registry.core.errors import RegistryError, store_errors
from notify_registry.core.logging import configure_logging
from notify_registry.tasks.watcher_sweep import shutdown, startup, sweep_expired_watchers


async def _init_db() -> None:
    engine = make_engine(get_settings())
    try:
        with store_errors():
            await init_db(engine)
    finally:
        await engine.dispose()


async def _sweep() -> int:
    ctx: dict = {}
    await startup(ctx)
    try:
        return await sweep_expired_watchers(ctx)
    finally:
        await shutdown(ctx)


def run(argv: list[str] | None = None) -> None:
    """CLI entry point for registry maintenance."""
    parser = argparse.ArgumentParser(description="Notify subscription registry")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("init-db", help="Create all tables in the configured database")
    sub.add_parser("sweep", help="Delete expired subscription watchers")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    log = structlog.get_logger()

    try:
        if args.command == "init-db":
            asyncio.run(_init_db())
            log.info("registry.schema_created")
        else:
            count = asyncio.run(_sweep())
            print(count)
    except RegistryError as exc:
        log.error("registry.command_failed", command=args.command, error=exc.code)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
