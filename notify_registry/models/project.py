"""Project model: a notification publisher and its key material."""

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Project(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "project"
    __table_args__ = (
        sa.UniqueConstraint("project_id", name="project_project_id_key"),
        sa.UniqueConstraint("app_domain", name="project_app_domain_key"),
        sa.Index("idx_project_topic", "topic"),
    )

    project_id: str = Field(nullable=False, sa_type=sa.Text)  # external project identifier
    app_domain: str = Field(nullable=False, sa_type=sa.Text)
    topic: str = Field(nullable=False, sa_type=sa.Text)
    # Fixed at creation; later upserts never touch these.
    authentication_public_key: str = Field(nullable=False, sa_type=sa.Text)
    authentication_private_key: str = Field(nullable=False, sa_type=sa.Text)
    subscribe_public_key: str = Field(nullable=False, sa_type=sa.Text)
    subscribe_private_key: str = Field(nullable=False, sa_type=sa.Text)
