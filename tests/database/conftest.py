"""Fixtures for tests that run the migrations on a throwaway Postgres.

pytest-postgresql starts a local server with pg_ctl, loads the migrations
into a template database and hands each test a fresh copy. Set PG_CTL to
point at a specific binary; without one these tests are skipped.
"""

import glob
import os
import shutil
from collections.abc import Callable, Generator
from pathlib import Path

import psycopg
import pytest
from pytest_postgresql import factories

from tests.database.store import Store

MIGRATIONS = sorted((Path(__file__).resolve().parents[2] / "supabase" / "migrations").glob("*.sql"))


def find_pg_ctl() -> str | None:
    if os.environ.get("PG_CTL"):
        return os.environ["PG_CTL"]
    found = shutil.which("pg_ctl")
    if found:
        return found
    candidates = sorted(glob.glob("/usr/lib/postgresql/*/bin/pg_ctl"))
    return candidates[-1] if candidates else None


PG_CTL = find_pg_ctl()

postgresql_proc = factories.postgresql_proc(executable=PG_CTL, load=MIGRATIONS)
postgresql = factories.postgresql("postgresql_proc")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if PG_CTL:
        return
    here = Path(__file__).parent
    skip = pytest.mark.skip(reason="pg_ctl not found; set PG_CTL to run database tests")
    for item in items:
        if here in item.path.parents:
            item.add_marker(skip)


@pytest.fixture
def db(postgresql: psycopg.Connection) -> psycopg.Connection:
    """The test database connection, in autocommit mode."""
    postgresql.commit()
    postgresql.autocommit = True
    return postgresql


@pytest.fixture
def store(db: psycopg.Connection) -> Store:
    return Store(db)


@pytest.fixture
def connect(db: psycopg.Connection) -> Generator[Callable[..., psycopg.Connection], None, None]:
    """Open extra connections to the test database, closed after the test."""
    opened: list[psycopg.Connection] = []

    def _connect(autocommit: bool = True) -> psycopg.Connection:
        conn = psycopg.connect(
            host=db.info.host,
            port=db.info.port,
            user=db.info.user,
            password=db.info.password or None,
            dbname=db.info.dbname,
            autocommit=autocommit,
        )
        opened.append(conn)
        return conn

    yield _connect

    for conn in opened:
        conn.close()
