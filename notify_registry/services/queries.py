"""
Read-side views over subscribers, their projects and their scopes.

Scope rows are outer-joined and folded back into one set per subscriber, so a
subscriber whose scope is empty is still returned (with an empty set). Scope
values that are not valid UUIDs are dropped by
``parse_scopes_and_ignore_invalid``.
"""

from __future__ import annotations

import uuid
from typing import Iterable, Sequence

from sqlalchemy import Row, select
from sqlalchemy.ext.asyncio import AsyncSession

from notify_registry.core.database import transaction
from notify_registry.core.errors import NotFound
from notify_registry.models.project import Project
from notify_registry.models.subscriber import Subscriber, SubscriberScope
from notify_registry.schemas.common import AccountId, Topic, parse_scopes_and_ignore_invalid
from notify_registry.schemas.subscribers import (
    SubscriberAccountAndScopes,
    SubscriberWithProject,
    SubscriberWithScope,
)

_SUBSCRIBER_COLUMNS = (
    Subscriber.id,
    Subscriber.project,
    Subscriber.account,
    Subscriber.sym_key,
    Subscriber.topic,
    Subscriber.expiry,
)


def _group_by_subscriber(rows: Iterable[Row]) -> list[tuple[Row, list[str | None]]]:
    """Fold (subscriber..., scope name) rows into one entry per subscriber id."""
    grouped: dict[uuid.UUID, tuple[Row, list[str | None]]] = {}
    for row in rows:
        entry = grouped.setdefault(row.id, (row, []))
        entry[1].append(row.name)
    return list(grouped.values())


def _to_subscriber_with_scope(row: Row, names: list[str | None]) -> SubscriberWithScope:
    return SubscriberWithScope(
        id=row.id,
        project=row.project,
        account=AccountId(row.account),
        sym_key=row.sym_key,
        topic=Topic(row.topic),
        scope=parse_scopes_and_ignore_invalid(names),
        expiry=row.expiry,
    )


def _to_subscriber_with_project(row: Row, names: list[str | None]) -> SubscriberWithProject:
    return SubscriberWithProject(
        app_domain=row.app_domain,
        authentication_public_key=row.authentication_public_key,
        account=AccountId(row.account),
        sym_key=row.sym_key,
        scope=parse_scopes_and_ignore_invalid(names),
        expiry=row.expiry,
    )


def _subscribers_with_scope():
    return select(*_SUBSCRIBER_COLUMNS, SubscriberScope.name).outerjoin(
        SubscriberScope, SubscriberScope.subscriber == Subscriber.id
    )


def _subscribers_with_project():
    return (
        select(
            Subscriber.id,
            Project.app_domain,
            Project.authentication_public_key,
            Subscriber.account,
            Subscriber.sym_key,
            Subscriber.expiry,
            SubscriberScope.name,
        )
        .join(Project, Project.id == Subscriber.project)
        .outerjoin(SubscriberScope, SubscriberScope.subscriber == Subscriber.id)
    )


async def get_subscriber_by_topic(topic: Topic, session: AsyncSession) -> SubscriberWithScope:
    async with transaction(session):
        result = await session.execute(
            _subscribers_with_scope()
            .where(Subscriber.topic == topic)
            .order_by(Subscriber.id)
        )
        groups = _group_by_subscriber(result.all())
    if not groups:
        raise NotFound("Subscriber not found")
    return _to_subscriber_with_scope(*groups[0])


async def get_subscribers_for_project_in(
    project: uuid.UUID,
    accounts: Sequence[AccountId],
    session: AsyncSession,
) -> list[SubscriberWithScope]:
    """Subscribers of ``project`` among ``accounts``; unknown accounts are skipped."""
    if not accounts:
        return []
    async with transaction(session):
        result = await session.execute(
            _subscribers_with_scope().where(
                Subscriber.project == project,
                Subscriber.account.in_(list(accounts)),
            )
        )
        groups = _group_by_subscriber(result.all())
    return [_to_subscriber_with_scope(row, names) for row, names in groups]


async def get_subscriptions_by_account(
    account: AccountId, session: AsyncSession
) -> list[SubscriberWithProject]:
    async with transaction(session):
        result = await session.execute(
            _subscribers_with_project().where(Subscriber.account == account)
        )
        groups = _group_by_subscriber(result.all())
    return [_to_subscriber_with_project(row, names) for row, names in groups]


async def get_subscriptions_by_account_and_app(
    account: AccountId, app_domain: str, session: AsyncSession
) -> list[SubscriberWithProject]:
    async with transaction(session):
        result = await session.execute(
            _subscribers_with_project().where(
                Subscriber.account == account,
                Project.app_domain == app_domain,
            )
        )
        groups = _group_by_subscriber(result.all())
    return [_to_subscriber_with_project(row, names) for row, names in groups]


async def get_subscriber_accounts_by_project_id(
    project_id: str, session: AsyncSession
) -> list[AccountId]:
    """Accounts subscribed to the project with external id ``project_id``."""
    async with transaction(session):
        result = await session.execute(
            select(Subscriber.account)
            .join(Project, Project.id == Subscriber.project)
            .where(Project.project_id == project_id)
        )
        return [AccountId(account) for account in result.scalars().all()]


async def get_subscriber_accounts_and_scopes_by_project_id(
    project_id: str, session: AsyncSession
) -> list[SubscriberAccountAndScopes]:
    async with transaction(session):
        result = await session.execute(
            select(Subscriber.id, Subscriber.account, SubscriberScope.name)
            .join(Project, Project.id == Subscriber.project)
            .outerjoin(SubscriberScope, SubscriberScope.subscriber == Subscriber.id)
            .where(Project.project_id == project_id)
        )
        groups = _group_by_subscriber(result.all())
    return [
        SubscriberAccountAndScopes(
            account=AccountId(row.account),
            scope=parse_scopes_and_ignore_invalid(names),
        )
        for row, names in groups
    ]


async def get_subscriber_topics(session: AsyncSession) -> list[Topic]:
    """Notify topics of every subscriber, in no particular order."""
    async with transaction(session):
        result = await session.execute(select(Subscriber.topic))
        return [Topic(topic) for topic in result.scalars().all()]
