"""
ARQ background task: remove subscription watchers whose expiry has passed.

Scheduled to run periodically (every hour by default).
"""

from __future__ import annotations

import structlog

from notify_registry.core.config import get_settings
from notify_registry.core.database import make_engine, make_session_factory, session_scope
from notify_registry.services.watchers import delete_expired_subscription_watchers

log = structlog.get_logger()


async def startup(ctx: dict) -> None:
    """Create the engine once per worker process."""
    engine = make_engine(get_settings())
    ctx["engine"] = engine
    ctx["session_factory"] = make_session_factory(engine)


async def shutdown(ctx: dict) -> None:
    await ctx["engine"].dispose()


async def sweep_expired_watchers(ctx: dict) -> int:
    """Delete expired watchers.

    Returns the number of watchers removed.
    """
    async with session_scope(ctx["session_factory"]) as session:
        count = await delete_expired_subscription_watchers(session)

    log.info("watcher_sweep.finished", count=count)
    return count


# ARQ worker settings
class WorkerSettings:
    """ARQ worker configuration."""

    functions = [sweep_expired_watchers]
    on_startup = startup
    on_shutdown = shutdown
    cron_jobs = [
        {
            "coroutine": sweep_expired_watchers,
            "hour": None,  # every hour
            "minute": get_settings().watcher_sweep_minute,
        },
    ]
