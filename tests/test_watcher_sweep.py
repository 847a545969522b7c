"""
Tests for the periodic watcher sweep task and the CLI entry point.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from notify_registry.core.config import get_settings
from notify_registry.main import run
from notify_registry.services.watchers import (
    get_subscription_watchers_for_account_by_app_or_all_app,
    upsert_subscription_watcher,
)
from notify_registry.tasks.watcher_sweep import WorkerSettings, sweep_expired_watchers


class TestSweepTask:
    async def test_sweeps_expired_watchers(self, session, session_factory):
        now = datetime.now(timezone.utc)
        await upsert_subscription_watcher("acct", None, "did:old", "s", now - timedelta(minutes=5), session)
        await upsert_subscription_watcher("acct", None, "did:new", "s", now + timedelta(hours=1), session)

        assert await sweep_expired_watchers({"session_factory": session_factory}) == 1

        watchers = await get_subscription_watchers_for_account_by_app_or_all_app(
            "acct", "app.com", session
        )
        assert [w.did_key for w in watchers] == ["did:new"]

    def test_worker_settings(self):
        assert WorkerSettings.functions == [sweep_expired_watchers]
        assert WorkerSettings.cron_jobs[0]["coroutine"] is sweep_expired_watchers
        assert WorkerSettings.cron_jobs[0]["hour"] is None


class TestCli:
    @pytest.fixture
    def cli_env(self, monkeypatch, database_url):
        monkeypatch.setenv("NOTIFY_DATABASE_URL", database_url)
        monkeypatch.setenv("NOTIFY_LOG_FORMAT", "text")
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_init_db_then_sweep(self, cli_env, capsys):
        run(["init-db"])
        run(["sweep"])
        out = capsys.readouterr().out.strip().splitlines()
        assert out[-1] == "0"

    def test_requires_command(self, cli_env):
        with pytest.raises(SystemExit):
            run([])
