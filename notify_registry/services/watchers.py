"""
Watcher store: ephemeral delegated key-management sessions.

A watcher is visible while its expiry lies in the future, invisible once it
has passed, and removed by ``delete_expired_subscription_watchers``. A later
upsert for the same did_key starts a new session.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notify_registry.core.database import transaction, upsert_insert
from notify_registry.models.base import as_utc, utcnow
from notify_registry.models.project import Project
from notify_registry.models.watcher import SubscriptionWatcher
from notify_registry.schemas.common import AccountId
from notify_registry.schemas.watchers import SubscriptionWatcherQuery

log = structlog.get_logger()


async def upsert_subscription_watcher(
    account: AccountId,
    project: Optional[uuid.UUID],
    did_key: str,
    sym_key: str,
    expiry: datetime,
    session: AsyncSession,
) -> None:
    """Insert a watcher, or overwrite the one already holding ``did_key``."""
    now = utcnow()
    stmt = upsert_insert(session, SubscriptionWatcher).values(
        id=uuid.uuid4(),
        account=account,
        project=project,
        did_key=did_key,
        sym_key=sym_key,
        expiry=expiry,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["did_key"],
        set_={
            "updated_at": now,
            "account": stmt.excluded.account,
            "project": stmt.excluded.project,
            "sym_key": stmt.excluded.sym_key,
            "expiry": stmt.excluded.expiry,
        },
    )

    async with transaction(session):
        await session.execute(stmt)

    log.info(
        "watcher.upserted",
        did_key=did_key,
        project=str(project) if project else None,
        expiry=as_utc(expiry).isoformat(),
    )


async def get_subscription_watchers_for_account_by_app_or_all_app(
    account: AccountId,
    app_domain: str,
    session: AsyncSession,
    now: Optional[datetime] = None,
) -> list[SubscriptionWatcherQuery]:
    """Active watchers of ``account`` that cover ``app_domain``.

    Global watchers (no project) cover every app.
    """
    now = as_utc(now) if now else utcnow()
    async with transaction(session):
        result = await session.execute(
            select(
                SubscriptionWatcher.project,
                SubscriptionWatcher.did_key,
                SubscriptionWatcher.sym_key,
            )
            .outerjoin(Project, Project.id == SubscriptionWatcher.project)
            .where(
                SubscriptionWatcher.expiry > now,
                SubscriptionWatcher.account == account,
                or_(
                    SubscriptionWatcher.project.is_(None),
                    Project.app_domain == app_domain,
                ),
            )
        )
        rows = result.all()

    return [
        SubscriptionWatcherQuery(project=row.project, did_key=row.did_key, sym_key=row.sym_key)
        for row in rows
    ]


async def delete_expired_subscription_watchers(
    session: AsyncSession,
    now: Optional[datetime] = None,
) -> int:
    """Delete every watcher whose expiry is at or before ``now``.

    Returns the number of watchers removed.
    """
    now = as_utc(now) if now else utcnow()
    async with transaction(session):
        result = await session.execute(
            delete(SubscriptionWatcher)
            .where(SubscriptionWatcher.expiry <= now)
            .execution_options(synchronize_session=False)
        )

    count = result.rowcount or 0
    if count:
        log.info("watcher.swept", count=count)
    return count
