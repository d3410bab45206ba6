# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Public share link tests."""

from httpx import AsyncClient

from albumrank_server.config import settings

from conftest import seed_albums


async def _shared_list(client: AsyncClient, headers, session_maker) -> tuple[int, list[int]]:
    album_ids = await seed_albums(session_maker, 3)
    list_id = (await client.post("/api/v1/lists", json={"name": "Best ever"}, headers=headers)).json()["id"]
    for album_id in album_ids:
        await client.post(f"/api/v1/lists/{list_id}/items", json={"album_id": album_id}, headers=headers)
    return list_id, album_ids


async def test_publish_resolve_unpublish(client: AsyncClient, alice, session_maker):
    list_id, album_ids = await _shared_list(client, alice, session_maker)
    await client.post(
        f"/api/v1/lists/{list_id}/reorder",
        json={"ordered_album_ids": [album_ids[2], album_ids[0], album_ids[1]]},
        headers=alice,
    )

    r = await client.post(f"/api/v1/lists/{list_id}/share", headers=alice)
    assert r.status_code == 200, r.text
    slug = r.json()["public_slug"]
    assert r.json()["is_public"] is True
    assert len(slug) == 32

    public = await client.get(f"/api/v1/public/rankings/{slug}")
    assert public.status_code == 200, public.text
    data = public.json()
    assert data["owner_name"] == "Alice"
    assert data["ranking"]["name"] == "Best ever"
    assert [i["album_id"] for i in data["items"]] == [album_ids[2], album_ids[0], album_ids[1]]
    assert [i["position"] for i in data["items"]] == [1, 2, 3]
    assert data["items"][0]["title"] == "Album 3"

    r = await client.delete(f"/api/v1/lists/{list_id}/share", headers=alice)
    assert r.json() == {"public_slug": None, "is_public": False}
    gone = await client.get(f"/api/v1/public/rankings/{slug}")
    assert gone.status_code == 404


async def test_unknown_and_private_slugs_look_the_same(client: AsyncClient, alice, session_maker):
    list_id, _ = await _shared_list(client, alice, session_maker)
    slug = (await client.post(f"/api/v1/lists/{list_id}/share", headers=alice)).json()["public_slug"]
    await client.delete(f"/api/v1/lists/{list_id}/share", headers=alice)

    private = await client.get(f"/api/v1/public/rankings/{slug}")
    unknown = await client.get("/api/v1/public/rankings/does-not-exist")
    assert private.status_code == unknown.status_code == 404
    assert private.json() == unknown.json()


async def test_republish_reuses_slug(client: AsyncClient, alice, session_maker):
    list_id, _ = await _shared_list(client, alice, session_maker)
    first = (await client.post(f"/api/v1/lists/{list_id}/share", headers=alice)).json()["public_slug"]
    second = (await client.post(f"/api/v1/lists/{list_id}/share", headers=alice)).json()["public_slug"]
    assert first == second


async def test_only_owner_can_share(client: AsyncClient, alice, bob, session_maker):
    list_id, _ = await _shared_list(client, alice, session_maker)
    r = await client.post(f"/api/v1/lists/{list_id}/share", headers=bob)
    assert r.status_code == 403


async def test_public_endpoint_is_rate_limited(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "public_rate_limit_per_minute", 2)
    codes = [(await client.get("/api/v1/public/rankings/nope")).status_code for _ in range(3)]
    assert codes == [404, 404, 429]
