"""Builders for registry rows used across the test modules."""

import uuid

from notify_registry.schemas.projects import KeyPair
from notify_registry.services.projects import get_project_by_project_id, upsert_project


def key_pair(label: str) -> KeyPair:
    return KeyPair(public_key=f"{label}-public", private_key=f"{label}-private")


async def create_project(session, name: str = "alpha"):
    """Register a project called ``name`` and return the stored row."""
    await upsert_project(
        f"{name}-project-id",
        f"{name}.com",
        f"{name}-topic",
        key_pair(f"{name}-auth"),
        key_pair(f"{name}-subscribe"),
        session,
    )
    return await get_project_by_project_id(f"{name}-project-id", session)


def notify_key() -> bytes:
    return uuid.uuid4().bytes * 2
