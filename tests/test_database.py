"""Tests for database URL handling."""

import pytest

from coachdesk.database import async_database_url, engine_options


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgres://coach:pw@db:5432/coachdesk", "postgresql+asyncpg://coach:pw@db:5432/coachdesk"),
        ("postgresql://coach:pw@db/coachdesk", "postgresql+asyncpg://coach:pw@db/coachdesk"),
        ("postgresql+psycopg2://coach:pw@db/coachdesk", "postgresql+asyncpg://coach:pw@db/coachdesk"),
        ("postgresql+asyncpg://coach:pw@db/coachdesk", "postgresql+asyncpg://coach:pw@db/coachdesk"),
        ("sqlite:///./coachdesk.db", "sqlite+aiosqlite:///./coachdesk.db"),
        ("sqlite+aiosqlite://", "sqlite+aiosqlite://"),
    ],
)
def test_async_database_url(url, expected):
    assert async_database_url(url) == expected


def test_server_databases_ping_pooled_connections():
    assert engine_options("postgresql+asyncpg://db/coachdesk")["pool_pre_ping"] is True
    assert "pool_pre_ping" not in engine_options("sqlite+aiosqlite:///./coachdesk.db")
