# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""List membership endpoint tests: add, remove, reorder, derived "Needs listening"."""

import pytest
from httpx import AsyncClient

from conftest import seed_albums


async def _create_list(client: AsyncClient, headers, name: str, mode: str = "ranked") -> int:
    r = await client.post("/api/v1/lists", json={"name": name, "mode": mode}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["id"]


async def _add(client: AsyncClient, headers, list_id: int, album_id: int):
    return await client.post(f"/api/v1/lists/{list_id}/items", json={"album_id": album_id}, headers=headers)


async def _items(client: AsyncClient, headers, list_id: int) -> list[dict]:
    r = await client.get(f"/api/v1/lists/{list_id}/items", headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


@pytest.fixture
async def album_ids(session_maker) -> list[int]:
    return await seed_albums(session_maker, 4)


async def test_ranked_add_appends_with_baseline_rating(client: AsyncClient, alice, album_ids):
    list_id = await _create_list(client, alice, "Top")
    for album_id in album_ids[:3]:
        assert (await _add(client, alice, list_id, album_id)).status_code == 204
    items = await _items(client, alice, list_id)
    assert [i["album_id"] for i in items] == album_ids[:3]
    assert [i["position"] for i in items] == [1, 2, 3]
    assert all(i["rating"] == 1500.0 and i["matches"] == 0 for i in items)
    assert items[0]["album"]["title"] == "Album 1"


async def test_add_existing_member_is_no_op(client: AsyncClient, alice, album_ids):
    list_id = await _create_list(client, alice, "Top")
    await _add(client, alice, list_id, album_ids[0])
    assert (await _add(client, alice, list_id, album_ids[0])).status_code == 204
    items = await _items(client, alice, list_id)
    assert [(i["album_id"], i["position"]) for i in items] == [(album_ids[0], 1)]


async def test_add_unknown_album_is_not_found(client: AsyncClient, alice):
    list_id = await _create_list(client, alice, "Top")
    assert (await _add(client, alice, list_id, 4242)).status_code == 404


async def test_add_to_other_users_list_is_forbidden(client: AsyncClient, alice, bob, album_ids):
    list_id = await _create_list(client, alice, "Mine")
    assert (await _add(client, bob, list_id, album_ids[0])).status_code == 403


async def test_collection_has_no_positions_newest_first(client: AsyncClient, alice, album_ids):
    list_id = await _create_list(client, alice, "Shelf", mode="collection")
    for album_id in album_ids[:3]:
        await _add(client, alice, list_id, album_id)
    items = await _items(client, alice, list_id)
    assert [i["album_id"] for i in items] == list(reversed(album_ids[:3]))
    assert all(i["position"] is None and i["rating"] is None for i in items)


async def test_remove_compacts_positions(client: AsyncClient, alice, album_ids):
    list_id = await _create_list(client, alice, "Top")
    for album_id in album_ids:
        await _add(client, alice, list_id, album_id)
    r = await client.delete(f"/api/v1/lists/{list_id}/items/{album_ids[1]}", headers=alice)
    assert r.status_code == 204
    items = await _items(client, alice, list_id)
    assert [(i["album_id"], i["position"]) for i in items] == [
        (album_ids[0], 1),
        (album_ids[2], 2),
        (album_ids[3], 3),
    ]


async def test_remove_non_member_is_not_found(client: AsyncClient, alice, album_ids):
    list_id = await _create_list(client, alice, "Top")
    r = await client.delete(f"/api/v1/lists/{list_id}/items/{album_ids[0]}", headers=alice)
    assert r.status_code == 404


async def test_remove_last_member_keeps_list(client: AsyncClient, alice, album_ids):
    list_id = await _create_list(client, alice, "Top")
    await _add(client, alice, list_id, album_ids[0])
    r = await client.delete(f"/api/v1/lists/{list_id}/items/{album_ids[0]}", headers=alice)
    assert r.status_code == 204
    assert await _items(client, alice, list_id) == []
    assert (await client.get(f"/api/v1/lists/{list_id}", headers=alice)).status_code == 200


async def test_reorder_then_read_back(client: AsyncClient, alice, album_ids):
    list_id = await _create_list(client, alice, "Top")
    for album_id in album_ids:
        await _add(client, alice, list_id, album_id)
    wanted = [album_ids[2], album_ids[0], album_ids[3], album_ids[1]]
    for _ in range(2):
        r = await client.post(
            f"/api/v1/lists/{list_id}/reorder", json={"ordered_album_ids": wanted}, headers=alice
        )
        assert r.status_code == 200, r.text
        assert r.json() == {"ok": True}
        items = await _items(client, alice, list_id)
        assert [i["album_id"] for i in items] == wanted
        assert [i["position"] for i in items] == [1, 2, 3, 4]


async def test_reorder_with_wrong_ids_is_rejected(client: AsyncClient, alice, album_ids):
    list_id = await _create_list(client, alice, "Top")
    for album_id in album_ids[:2]:
        await _add(client, alice, list_id, album_id)
    r = await client.post(
        f"/api/v1/lists/{list_id}/reorder",
        json={"ordered_album_ids": [album_ids[0], album_ids[2]]},
        headers=alice,
    )
    assert r.status_code == 422
    assert r.json()["detail"] == "ordered_album_ids must exactly match current ranking items"


async def test_reorder_collection_is_rejected(client: AsyncClient, alice, album_ids):
    list_id = await _create_list(client, alice, "Shelf", mode="collection")
    await _add(client, alice, list_id, album_ids[0])
    r = await client.post(
        f"/api/v1/lists/{list_id}/reorder", json={"ordered_album_ids": [album_ids[0]]}, headers=alice
    )
    assert r.status_code == 422


async def test_needs_listening_follows_status(client: AsyncClient, alice, album_ids):
    r = await client.post("/api/v1/lists/ensure", json={}, headers=alice)
    needs = next(rl for rl in r.json() if rl["name"] == "Needs listening")

    for album_id in album_ids[:3]:
        r = await client.patch(f"/api/v1/albums/{album_id}/user", json={"status": "not_listened"}, headers=alice)
        assert r.status_code == 200, r.text
    await client.patch(f"/api/v1/albums/{album_ids[0]}/user", json={"status": "listening"}, headers=alice)
    await client.patch(f"/api/v1/albums/{album_ids[2]}/user", json={"status": "listened"}, headers=alice)

    items = await _items(client, alice, needs["id"])
    assert [i["album_id"] for i in items] == [album_ids[0], album_ids[1]]
    assert [i["status"] for i in items] == ["listening", "not_listened"]

    # Membership is derived, never stored
    assert (await _add(client, alice, needs["id"], album_ids[3])).status_code == 422
    r = await client.delete(f"/api/v1/lists/{needs['id']}/items/{album_ids[0]}", headers=alice)
    assert r.status_code == 422


async def test_album_memberships(client: AsyncClient, alice, album_ids):
    r = await client.post("/api/v1/lists/ensure", json={"years": [2001]}, headers=alice)
    lists = {rl["name"]: rl["id"] for rl in r.json()}
    shelf = await _create_list(client, alice, "Shelf", mode="collection")
    await _add(client, alice, lists["2001"], album_ids[0])
    await _add(client, alice, shelf, album_ids[0])
    await client.patch(f"/api/v1/albums/{album_ids[0]}/user", json={"status": "listening"}, headers=alice)

    r = await client.get(f"/api/v1/albums/{album_ids[0]}/memberships", headers=alice)
    assert r.status_code == 200, r.text
    by_id = {m["list_id"]: m for m in r.json()}
    assert by_id[lists["2001"]]["position"] == 1
    assert by_id[shelf]["position"] is None
    assert by_id[lists["Needs listening"]]["mode"] == "collection"
    assert len(by_id) == 3
