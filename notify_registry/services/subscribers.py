"""
Subscriber store: subscription lifecycle (create, renew, delete).

Every mutation writes the subscriber row and its scope rows in one
transaction; see ``replace_subscriber_scope``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import AbstractSet, Optional

import structlog
from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notify_registry.core.database import transaction, upsert_insert
from notify_registry.core.errors import NotFound
from notify_registry.models.base import as_utc, utcnow
from notify_registry.models.subscriber import Subscriber, SubscriberScope
from notify_registry.schemas.common import AccountId, Topic
from notify_registry.services.scopes import replace_subscriber_scope

log = structlog.get_logger()

SUBSCRIPTION_TTL = timedelta(days=30)
NOTIFY_KEY_LENGTH = 32


async def upsert_subscriber(
    project: uuid.UUID,
    account: AccountId,
    scope: AbstractSet[uuid.UUID],
    notify_key: bytes,
    notify_topic: Topic,
    session: AsyncSession,
    now: Optional[datetime] = None,
) -> uuid.UUID:
    """Create or reset the subscription of ``account`` to ``project``.

    Resets the symmetric key and topic, renews the expiry and replaces the
    scope. Returns the subscriber id, which is stable across repeat calls.
    """
    if len(notify_key) != NOTIFY_KEY_LENGTH:
        raise ValueError(f"Notify key must be {NOTIFY_KEY_LENGTH} bytes")

    now = as_utc(now) if now else utcnow()
    stmt = upsert_insert(session, Subscriber).values(
        id=uuid.uuid4(),
        project=project,
        account=account,
        sym_key=notify_key.hex(),
        topic=notify_topic,
        expiry=now + SUBSCRIPTION_TTL,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["project", "account"],
        set_={
            "updated_at": now,
            "sym_key": stmt.excluded.sym_key,
            "topic": stmt.excluded.topic,
            "expiry": stmt.excluded.expiry,
        },
    ).returning(Subscriber.id)

    async with transaction(session):
        subscriber_id = (await session.execute(stmt)).scalar_one()
        await replace_subscriber_scope(subscriber_id, scope, session)

    log.info(
        "subscriber.upserted",
        subscriber_id=str(subscriber_id),
        project=str(project),
        scope_size=len(scope),
    )
    return subscriber_id


async def update_subscriber(
    project: uuid.UUID,
    account: AccountId,
    scope: AbstractSet[uuid.UUID],
    session: AsyncSession,
    now: Optional[datetime] = None,
) -> Subscriber:
    """Renew an existing subscription and replace its scope.

    The symmetric key and topic are left alone. Raises NotFound when the
    account has no subscription to the project.
    """
    now = as_utc(now) if now else utcnow()
    async with transaction(session):
        result = await session.execute(
            update(Subscriber)
            .where(Subscriber.project == project, Subscriber.account == account)
            .values(expiry=now + SUBSCRIPTION_TTL, updated_at=now)
            .returning(Subscriber.id)
            .execution_options(synchronize_session=False)
        )
        subscriber_id = result.scalar_one_or_none()
        if subscriber_id is None:
            raise NotFound("Subscriber not found")

        await replace_subscriber_scope(subscriber_id, scope, session)

        result = await session.execute(
            select(Subscriber)
            .where(Subscriber.id == subscriber_id)
            .execution_options(populate_existing=True)
        )
        subscriber = result.scalar_one()

    log.info("subscriber.updated", subscriber_id=str(subscriber_id), scope_size=len(scope))
    return subscriber


async def delete_subscriber(subscriber_id: uuid.UUID, session: AsyncSession) -> bool:
    """Remove a subscriber and its scope rows.

    Deleting an id that does not exist is not an error, so callers may retry
    freely. Returns whether a subscriber row was actually removed.
    """
    async with transaction(session):
        await session.execute(
            delete(SubscriberScope)
            .where(SubscriberScope.subscriber == subscriber_id)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(
            delete(Subscriber)
            .where(Subscriber.id == subscriber_id)
            .execution_options(synchronize_session=False)
        )

    deleted = bool(result.rowcount)
    log.info("subscriber.deleted", subscriber_id=str(subscriber_id), existed=deleted)
    return deleted
