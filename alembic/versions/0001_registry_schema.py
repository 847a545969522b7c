"""Registry schema: projects, subscribers, scopes and subscription watchers.

Revision ID: 0001_registry_schema
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_registry_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


def upgrade() -> None:
    # project
    op.create_table(
        "project",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        *_timestamps(),
        sa.Column("project_id", sa.Text(), nullable=False),
        sa.Column("app_domain", sa.Text(), nullable=False),
        sa.Column("topic", sa.Text(), nullable=False),
        sa.Column("authentication_public_key", sa.Text(), nullable=False),
        sa.Column("authentication_private_key", sa.Text(), nullable=False),
        sa.Column("subscribe_public_key", sa.Text(), nullable=False),
        sa.Column("subscribe_private_key", sa.Text(), nullable=False),
        sa.UniqueConstraint("project_id", name="project_project_id_key"),
        sa.UniqueConstraint("app_domain", name="project_app_domain_key"),
    )
    op.create_index("idx_project_topic", "project", ["topic"])

    # subscriber
    op.create_table(
        "subscriber",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        *_timestamps(),
        sa.Column("project", postgresql.UUID(as_uuid=True), sa.ForeignKey("project.id", ondelete="CASCADE"), nullable=False),
        sa.Column("account", sa.Text(), nullable=False),
        sa.Column("sym_key", sa.Text(), nullable=False),
        sa.Column("topic", sa.Text(), nullable=False),
        sa.Column("expiry", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("project", "account", name="subscriber_project_account_key"),
    )
    op.create_index("idx_subscriber_project", "subscriber", ["project"])
    op.create_index("idx_subscriber_account", "subscriber", ["account"])
    op.create_index("idx_subscriber_topic", "subscriber", ["topic"])

    # subscriber_scope
    op.create_table(
        "subscriber_scope",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("subscriber", postgresql.UUID(as_uuid=True), sa.ForeignKey("subscriber.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
    )
    op.create_index("idx_subscriber_scope_subscriber", "subscriber_scope", ["subscriber"])

    # subscription_watcher
    op.create_table(
        "subscription_watcher",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        *_timestamps(),
        sa.Column("account", sa.Text(), nullable=False),
        sa.Column("project", postgresql.UUID(as_uuid=True), sa.ForeignKey("project.id", ondelete="CASCADE"), nullable=True),
        sa.Column("did_key", sa.Text(), nullable=False),
        sa.Column("sym_key", sa.Text(), nullable=False),
        sa.Column("expiry", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("did_key", name="subscription_watcher_did_key_key"),
    )
    op.create_index("idx_subscription_watcher_account", "subscription_watcher", ["account"])
    op.create_index("idx_subscription_watcher_expiry", "subscription_watcher", ["expiry"])


def downgrade() -> None:
    op.drop_table("subscription_watcher")
    op.drop_table("subscriber_scope")
    op.drop_table("subscriber")
    op.drop_table("project")
