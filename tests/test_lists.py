# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Ranking list endpoint tests."""

from httpx import AsyncClient
from sqlalchemy import func, select

from albumrank_server.models import RankingList
from albumrank_server.services import lists as list_service

from conftest import seed_albums


async def _ensure(client: AsyncClient, headers, years=(), custom_names=()):
    r = await client.post(
        "/api/v1/lists/ensure",
        json={"years": list(years), "custom_names": list(custom_names)},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    return r.json()


async def test_ensure_lists_creates_year_custom_and_needs_listening(client: AsyncClient, alice):
    lists = await _ensure(client, alice, years=[2021, 2023], custom_names=["Jazz"])
    by_name = {rl["name"]: rl for rl in lists}
    assert set(by_name) == {"2021", "2023", "Jazz", "Needs listening"}
    assert by_name["2021"]["kind"] == "year"
    assert by_name["2021"]["year"] == 2021
    assert by_name["2021"]["mode"] == "ranked"
    assert by_name["Jazz"]["kind"] == "custom"
    assert by_name["Needs listening"]["mode"] == "collection"
    assert by_name["Needs listening"]["description"] == "Albums to listen to"


async def test_ensure_lists_is_idempotent(client: AsyncClient, alice):
    first = await _ensure(client, alice, years=[2020], custom_names=["Road trip"])
    second = await _ensure(client, alice, years=[2020], custom_names=["Road trip"])
    assert len(second) == len(first) == 3
    assert sorted(rl["id"] for rl in first) == sorted(rl["id"] for rl in second)


async def test_lists_are_scoped_to_owner(client: AsyncClient, alice, bob):
    await _ensure(client, alice, years=[2019])
    r = await client.get("/api/v1/lists", headers=bob)
    assert r.status_code == 200
    assert r.json() == []


async def test_create_list_and_duplicate_name(client: AsyncClient, alice):
    r = await client.post(
        "/api/v1/lists",
        json={"name": "  Desert island  ", "mode": "collection", "description": "Ten picks"},
        headers=alice,
    )
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["name"] == "Desert island"
    assert data["mode"] == "collection"
    assert data["is_public"] is False

    dup = await client.post("/api/v1/lists", json={"name": "Desert island"}, headers=alice)
    assert dup.status_code == 409
    assert "already exists" in dup.json()["detail"]


async def test_create_year_list_requires_year(client: AsyncClient, alice):
    r = await client.post("/api/v1/lists", json={"kind": "year"}, headers=alice)
    assert r.status_code == 422
    r = await client.post("/api/v1/lists", json={"kind": "year", "year": 1999}, headers=alice)
    assert r.status_code == 201
    assert r.json()["name"] == "1999"


async def test_create_list_rejects_reserved_and_blank_names(client: AsyncClient, alice):
    r = await client.post("/api/v1/lists", json={"name": "Needs listening"}, headers=alice)
    assert r.status_code == 422
    r = await client.post("/api/v1/lists", json={"name": "   "}, headers=alice)
    assert r.status_code == 422


async def test_get_list_of_other_user_is_forbidden(client: AsyncClient, alice, bob):
    lists = await _ensure(client, alice, years=[2018])
    r = await client.get(f"/api/v1/lists/{lists[0]['id']}", headers=bob)
    assert r.status_code == 403
    r = await client.get("/api/v1/lists/9999", headers=alice)
    assert r.status_code == 404


async def test_rename_custom_list(client: AsyncClient, alice):
    created = (await client.post("/api/v1/lists", json={"name": "Old"}, headers=alice)).json()
    r = await client.patch(
        f"/api/v1/lists/{created['id']}", json={"name": "New", "description": "Fresh"}, headers=alice
    )
    assert r.status_code == 200, r.text
    assert r.json()["name"] == "New"
    assert r.json()["description"] == "Fresh"


async def test_year_list_cannot_be_renamed(client: AsyncClient, alice):
    lists = await _ensure(client, alice, years=[2022])
    year_list = next(rl for rl in lists if rl["kind"] == "year")
    r = await client.patch(f"/api/v1/lists/{year_list['id']}", json={"name": "Other"}, headers=alice)
    assert r.status_code == 422


async def test_delete_list(client: AsyncClient, alice, session_maker):
    album_ids = await seed_albums(session_maker, 2)
    created = (await client.post("/api/v1/lists", json={"name": "Temp"}, headers=alice)).json()
    for album_id in album_ids:
        r = await client.post(
            f"/api/v1/lists/{created['id']}/items", json={"album_id": album_id}, headers=alice
        )
        assert r.status_code == 204
    r = await client.delete(f"/api/v1/lists/{created['id']}", headers=alice)
    assert r.status_code == 204
    r = await client.get(f"/api/v1/lists/{created['id']}", headers=alice)
    assert r.status_code == 404
    # Albums are shared and survive
    r = await client.get(f"/api/v1/albums/{album_ids[0]}", headers=alice)
    assert r.status_code == 200


async def test_needs_listening_cannot_be_deleted(client: AsyncClient, alice):
    lists = await _ensure(client, alice)
    needs = next(rl for rl in lists if rl["name"] == "Needs listening")
    r = await client.delete(f"/api/v1/lists/{needs['id']}", headers=alice)
    assert r.status_code == 422


async def test_requires_authentication(client: AsyncClient):
    r = await client.get("/api/v1/lists")
    assert r.status_code == 401


async def test_concurrent_insert_counts_as_existing(db, user, monkeypatch):
    (existing,) = [rl for rl in await list_service.ensure_lists(db, user.id, [2020], []) if rl.name == "2020"]
    real_find = list_service._find_list
    calls = []

    # The first lookup misses, as if another request inserted the row after it
    async def racing_find(*args, **kwargs):
        calls.append(args)
        if len(calls) == 1:
            return None
        return await real_find(*args, **kwargs)

    monkeypatch.setattr(list_service, "_find_list", racing_find)
    ranking_list, created = await list_service._insert_if_missing(
        db, user.id, "year", "2020", year=2020, mode="ranked"
    )
    assert created is False
    assert ranking_list.id == existing.id
    assert len(calls) == 2
    count = await db.scalar(select(func.count()).select_from(RankingList).where(RankingList.user_id == user.id))
    assert count == 2  # "2020" and "Needs listening"
