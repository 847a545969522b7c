"""
Tests for the read-side query layer.

Tests cover:
- Lossy scope decoding (invalid entries dropped, read still succeeds)
- Subscriber views by topic, by account, by account and app
- Project-level account listings
"""

from __future__ import annotations

import uuid

import pytest
from structlog.testing import capture_logs

from notify_registry.core.errors import NotFound
from notify_registry.models.subscriber import SubscriberScope
from notify_registry.schemas.common import parse_scopes_and_ignore_invalid
from notify_registry.services.queries import (
    get_subscriber_accounts_and_scopes_by_project_id,
    get_subscriber_accounts_by_project_id,
    get_subscriber_by_topic,
    get_subscriber_topics,
    get_subscribers_for_project_in,
    get_subscriptions_by_account,
    get_subscriptions_by_account_and_app,
)
from notify_registry.services.subscribers import upsert_subscriber

from factories import create_project, notify_key

X, Y = uuid.uuid4(), uuid.uuid4()


class TestParseScopes:
    def test_drops_invalid_entries(self):
        assert parse_scopes_and_ignore_invalid([str(X), "not-a-uuid"]) == {X}

    def test_collapses_duplicates(self):
        assert parse_scopes_and_ignore_invalid([str(X), str(X).upper()]) == {X}

    def test_outer_join_nulls_are_skipped(self):
        assert parse_scopes_and_ignore_invalid([None]) == set()

    def test_dropped_entry_is_logged(self):
        with capture_logs() as logs:
            parse_scopes_and_ignore_invalid(["garbage"])
        assert logs == [
            {"event": "scope.invalid_dropped", "value": "garbage", "log_level": "warning"}
        ]


class TestSubscriberViews:
    async def test_malformed_stored_scope_is_dropped(self, session):
        project = await create_project(session)
        subscriber_id = await upsert_subscriber(
            project.id, "acct", {X}, notify_key(), "sub-topic", session
        )
        session.add(SubscriberScope(subscriber=subscriber_id, name="definitely-not-a-uuid"))
        await session.commit()

        sub = await get_subscriber_by_topic("sub-topic", session)
        assert sub.scope == {X}

    async def test_by_topic_not_found(self, session):
        with pytest.raises(NotFound):
            await get_subscriber_by_topic("missing", session)

    async def test_for_project_in_accounts(self, session):
        alpha = await create_project(session, "alpha")
        beta = await create_project(session, "beta")
        await upsert_subscriber(alpha.id, "a1", {X}, notify_key(), "t1", session)
        await upsert_subscriber(alpha.id, "a2", {X, Y}, notify_key(), "t2", session)
        await upsert_subscriber(alpha.id, "a3", {Y}, notify_key(), "t3", session)
        await upsert_subscriber(beta.id, "a1", {Y}, notify_key(), "t4", session)

        subs = await get_subscribers_for_project_in(alpha.id, ["a1", "a2", "nobody"], session)
        by_account = {s.account: s for s in subs}
        assert set(by_account) == {"a1", "a2"}
        assert by_account["a1"].scope == {X}
        assert by_account["a2"].scope == {X, Y}
        assert all(s.project == alpha.id for s in subs)

    async def test_for_project_in_no_accounts(self, session):
        project = await create_project(session)
        assert await get_subscribers_for_project_in(project.id, [], session) == []

    async def test_by_account_spans_projects(self, session):
        alpha = await create_project(session, "alpha")
        beta = await create_project(session, "beta")
        await upsert_subscriber(alpha.id, "acct", {X}, notify_key(), "t1", session)
        await upsert_subscriber(beta.id, "acct", {X, Y}, notify_key(), "t2", session)
        await upsert_subscriber(beta.id, "other", {Y}, notify_key(), "t3", session)

        subs = await get_subscriptions_by_account("acct", session)
        by_app = {s.app_domain: s for s in subs}
        assert set(by_app) == {"alpha.com", "beta.com"}
        assert by_app["alpha.com"].authentication_public_key == "alpha-auth-public"
        assert by_app["alpha.com"].scope == {X}
        assert by_app["beta.com"].scope == {X, Y}

    async def test_by_account_and_app(self, session):
        alpha = await create_project(session, "alpha")
        beta = await create_project(session, "beta")
        key = notify_key()
        await upsert_subscriber(alpha.id, "acct", {X, Y}, key, "t1", session)
        await upsert_subscriber(beta.id, "acct", {Y}, notify_key(), "t2", session)

        subs = await get_subscriptions_by_account_and_app("acct", "alpha.com", session)
        assert len(subs) == 1
        assert subs[0].sym_key == key.hex()
        assert subs[0].scope == {X, Y}
        assert await get_subscriptions_by_account_and_app("acct", "gamma.com", session) == []


class TestProjectListings:
    async def test_accounts_and_scopes_by_project_id(self, session):
        alpha = await create_project(session, "alpha")
        await upsert_subscriber(alpha.id, "a1", {X}, notify_key(), "t1", session)
        await upsert_subscriber(alpha.id, "a2", set(), notify_key(), "t2", session)

        assert sorted(await get_subscriber_accounts_by_project_id("alpha-project-id", session)) == [
            "a1",
            "a2",
        ]
        listing = await get_subscriber_accounts_and_scopes_by_project_id("alpha-project-id", session)
        assert {entry.account: entry.scope for entry in listing} == {"a1": {X}, "a2": set()}

    async def test_unknown_project_lists_nothing(self, session):
        assert await get_subscriber_accounts_by_project_id("missing", session) == []
        assert await get_subscriber_accounts_and_scopes_by_project_id("missing", session) == []

    async def test_subscriber_topics(self, session):
        alpha = await create_project(session, "alpha")
        await upsert_subscriber(alpha.id, "a1", {X}, notify_key(), "t1", session)
        await upsert_subscriber(alpha.id, "a2", {Y}, notify_key(), "t2", session)
        assert sorted(await get_subscriber_topics(session)) == ["t1", "t2"]
