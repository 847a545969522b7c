"""
Shared fixtures: a throwaway on-disk SQLite registry per test.

An on-disk file (rather than :memory:) gives every pooled connection the same
database, which the concurrent-reader tests rely on.
"""

import pytest

from notify_registry.core.config import Settings
from notify_registry.core.database import init_db, make_engine, make_session_factory


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}"


@pytest.fixture
async def engine(database_url):
    eng = make_engine(Settings(database_url=database_url))
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s
