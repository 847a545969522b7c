"""Subscriber and subscriber scope models."""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UTCDateTime, UUIDMixin


class Subscriber(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "subscriber"
    __table_args__ = (
        sa.UniqueConstraint("project", "account", name="subscriber_project_account_key"),
        sa.Index("idx_subscriber_project", "project"),
        sa.Index("idx_subscriber_account", "account"),
        sa.Index("idx_subscriber_topic", "topic"),
    )

    project: uuid.UUID = Field(foreign_key="project.id", ondelete="CASCADE", nullable=False)
    account: str = Field(nullable=False, sa_type=sa.Text)
    sym_key: str = Field(nullable=False, sa_type=sa.Text)  # hex-encoded 32-byte notify key
    topic: str = Field(nullable=False, sa_type=sa.Text)
    expiry: datetime = Field(nullable=False, sa_type=UTCDateTime)


class SubscriberScope(UUIDMixin, SQLModel, table=True):
    __tablename__ = "subscriber_scope"
    __table_args__ = (sa.Index("idx_subscriber_scope_subscriber", "subscriber"),)

    subscriber: uuid.UUID = Field(foreign_key="subscriber.id", ondelete="CASCADE", nullable=False)
    name: str = Field(nullable=False, sa_type=sa.Text)  # scope UUID as text
