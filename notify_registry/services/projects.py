"""
Project store: identity and key-pair persistence for notification publishers.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notify_registry.core.database import transaction, upsert_insert
from notify_registry.core.errors import NotFound
from notify_registry.models.base import utcnow
from notify_registry.models.project import Project
from notify_registry.schemas.common import Topic
from notify_registry.schemas.projects import KeyPair, ProjectWithPublicKeys

log = structlog.get_logger()


async def upsert_project(
    project_id: str,
    app_domain: str,
    topic: Topic,
    authentication_key: KeyPair,
    subscribe_key: KeyPair,
    session: AsyncSession,
) -> ProjectWithPublicKeys:
    """Register a project, or refresh the app domain of an existing one.

    Key material is only written on first insert. The public keys returned are
    the stored ones, which differ from the supplied ones on repeat calls.
    """
    now = utcnow()
    stmt = upsert_insert(session, Project).values(
        id=uuid.uuid4(),
        project_id=project_id,
        app_domain=app_domain,
        topic=topic,
        authentication_public_key=authentication_key.public_key,
        authentication_private_key=authentication_key.private_key,
        subscribe_public_key=subscribe_key.public_key,
        subscribe_private_key=subscribe_key.private_key,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["project_id"],
        set_={"app_domain": stmt.excluded.app_domain, "updated_at": now},
    ).returning(Project.authentication_public_key, Project.subscribe_public_key)

    async with transaction(session):
        row = (await session.execute(stmt)).one()

    log.info("project.upserted", project_id=project_id, app_domain=app_domain)
    return ProjectWithPublicKeys(
        authentication_public_key=row.authentication_public_key,
        subscribe_public_key=row.subscribe_public_key,
    )


async def _get_project_where(session: AsyncSession, *criteria) -> Project:
    async with transaction(session):
        result = await session.execute(
            select(Project).where(*criteria).execution_options(populate_existing=True)
        )
        project = result.scalars().first()
    if project is None:
        raise NotFound("Project not found")
    return project


async def get_project_by_id(id: uuid.UUID, session: AsyncSession) -> Project:
    return await _get_project_where(session, Project.id == id)


async def get_project_by_project_id(project_id: str, session: AsyncSession) -> Project:
    return await _get_project_where(session, Project.project_id == project_id)


async def get_project_by_app_domain(app_domain: str, session: AsyncSession) -> Project:
    return await _get_project_where(session, Project.app_domain == app_domain)


async def get_project_by_topic(topic: Topic, session: AsyncSession) -> Project:
    return await _get_project_where(session, Project.topic == topic)


async def get_project_topics(session: AsyncSession) -> list[Topic]:
    """Topics of every registered project, in no particular order."""
    async with transaction(session):
        result = await session.execute(select(Project.topic))
        return [Topic(topic) for topic in result.scalars().all()]
