# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest fixtures. Each test gets a fresh SQLite database (aiosqlite) in tmp_path."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from albumrank_server import rate_limit
from albumrank_server.auth import create_access_token
from albumrank_server.database import get_db
from albumrank_server.main import app
from albumrank_server.models import Album, Base, User
from albumrank_server.services.artwork import ArtworkStore, get_artwork_store


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    # pysqlite's own transaction handling breaks SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_maker):
    """Session for service-level tests. Do not mix with `client` in one test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def artwork_store(tmp_path):
    return ArtworkStore(tmp_path / "album-art")


@pytest.fixture
async def client(session_maker, artwork_store):
    async def _get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_artwork_store] = lambda: artwork_store
    rate_limit.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    rate_limit.reset()


def auth_headers(user_id: int, name: str | None = None) -> dict[str, str]:
    claims = {"sub": str(user_id), "preferred_username": f"user{user_id}"}
    if name:
        claims["name"] = name
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


@pytest.fixture
def alice() -> dict[str, str]:
    return auth_headers(1, "Alice")


@pytest.fixture
def bob() -> dict[str, str]:
    return auth_headers(2, "Bob")


async def seed_albums(session_maker, count: int, prefix: str = "Album") -> list[int]:
    """Insert manual albums in their own committed transaction; returns ids in insert order."""
    async with session_maker() as session:
        albums = [
            Album(provider="manual", title=f"{prefix} {i}", artist="Artist", release_year=2000 + i)
            for i in range(1, count + 1)
        ]
        session.add_all(albums)
        await session.commit()
        return [a.id for a in albums]


@pytest.fixture
async def user(db) -> User:
    u = User(id=1, username="alice", display_name="Alice")
    db.add(u)
    await db.flush()
    return u


@pytest.fixture
async def other_user(db) -> User:
    u = User(id=2, username="bob")
    db.add(u)
    await db.flush()
    return u


@pytest.fixture
async def albums(db) -> list[Album]:
    rows = [
        Album(provider="manual", title=f"Album {i}", artist="Artist", release_year=2000 + i)
        for i in range(1, 6)
    ]
    db.add_all(rows)
    await db.flush()
    return rows
