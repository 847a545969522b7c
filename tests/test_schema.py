"""
Tests for the declared table layout.

Index and unique constraint names must match the 0001 migration so that
autogenerate starts from a clean slate.
"""

import sqlalchemy as sa
from sqlmodel import SQLModel

import notify_registry.models  # noqa: F401

EXPECTED_INDEXES = {
    "project": {"idx_project_topic"},
    "subscriber": {"idx_subscriber_project", "idx_subscriber_account", "idx_subscriber_topic"},
    "subscriber_scope": {"idx_subscriber_scope_subscriber"},
    "subscription_watcher": {"idx_subscription_watcher_account", "idx_subscription_watcher_expiry"},
}

EXPECTED_UNIQUES = {
    "project": {"project_project_id_key", "project_app_domain_key"},
    "subscriber": {"subscriber_project_account_key"},
    "subscriber_scope": set(),
    "subscription_watcher": {"subscription_watcher_did_key_key"},
}


def _unique_names(table) -> set[str]:
    return {c.name for c in table.constraints if isinstance(c, sa.UniqueConstraint)}


def test_index_names_match_migration():
    for name, expected in EXPECTED_INDEXES.items():
        table = SQLModel.metadata.tables[name]
        assert {index.name for index in table.indexes} == expected


def test_unique_constraint_names_match_migration():
    for name, expected in EXPECTED_UNIQUES.items():
        assert _unique_names(SQLModel.metadata.tables[name]) == expected


def test_primary_keys_carry_no_extra_index():
    for table in SQLModel.metadata.tables.values():
        assert not table.c.id.index
