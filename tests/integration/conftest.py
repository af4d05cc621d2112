import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool, init_schema
from app.database.postgres_store import PostgresRecordStore


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "logdedup_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings, wait_timeout=5)
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        init_schema()
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def clean_tables(db_conn: psycopg.Connection[Any]) -> Generator[None, None, None]:
    _truncate(db_conn)
    yield
    _truncate(db_conn)


@pytest.fixture
def postgres_store(clean_tables: None) -> PostgresRecordStore:
    return PostgresRecordStore()


def _truncate(conn: psycopg.Connection[Any]) -> None:
    with conn.cursor() as cur:
        cur.execute("TRUNCATE cache_links, verdicts, submissions RESTART IDENTITY CASCADE")
    conn.commit()
