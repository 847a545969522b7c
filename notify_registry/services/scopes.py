"""
Scope synchronisation: replace-all of a subscriber's scope rows.
"""

from __future__ import annotations

import uuid
from typing import AbstractSet

from sqlalchemy import delete, insert
from sqlalchemy.ext.asyncio import AsyncSession

from notify_registry.models.subscriber import SubscriberScope


async def replace_subscriber_scope(
    subscriber_id: uuid.UUID,
    scope: AbstractSet[uuid.UUID],
    session: AsyncSession,
) -> None:
    """Make the subscriber's scope rows exactly ``scope``.

    Deletes every existing row, then bulk-inserts one row per scope id. Runs
    in the caller's transaction and never commits, so the delete and insert
    are only ever observed together with the subscriber row change.
    """
    if not session.in_transaction():
        raise RuntimeError("Scope replacement must run inside the subscriber transaction")

    await session.execute(
        delete(SubscriberScope)
        .where(SubscriberScope.subscriber == subscriber_id)
        .execution_options(synchronize_session=False)
    )
    if not scope:
        return
    await session.execute(
        insert(SubscriberScope),
        [
            {"id": uuid.uuid4(), "subscriber": subscriber_id, "name": str(scope_id)}
            for scope_id in scope
        ],
    )
