"""Subscription watcher model (ephemeral, expiry-scoped)."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UTCDateTime, UUIDMixin


class SubscriptionWatcher(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "subscription_watcher"
    __table_args__ = (
        sa.UniqueConstraint("did_key", name="subscription_watcher_did_key_key"),
        sa.Index("idx_subscription_watcher_account", "account"),
        sa.Index("idx_subscription_watcher_expiry", "expiry"),
    )

    account: str = Field(nullable=False, sa_type=sa.Text)
    project: Optional[uuid.UUID] = Field(
        default=None, foreign_key="project.id", ondelete="CASCADE"
    )  # None = watches all apps
    did_key: str = Field(nullable=False, sa_type=sa.Text)
    sym_key: str = Field(nullable=False, sa_type=sa.Text)
    expiry: datetime = Field(nullable=False, sa_type=UTCDateTime)
