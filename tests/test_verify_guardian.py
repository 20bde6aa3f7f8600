from scripts.verify_guardian import find_guardian, list_unverified, set_verified

from conftest import create_guardian, create_vital


async def test_verify_guardian_by_email_and_id(client):
    vital_headers, _ = await create_vital(client)
    _, guardian = await create_guardian(client)
    assert [g.name for g in await list_unverified()] == ["Grace Silva"]

    found = await find_guardian(email="Guardian@Example.com")
    assert str(found.id) == guardian["id"]
    await set_verified(found)
    assert await list_unverified() == []

    verified = await client.get("/api/guardians", params={"verified": "true"}, headers=vital_headers)
    assert [g["id"] for g in verified.json()] == [guardian["id"]]

    again = await find_guardian(guardian_id=guardian["id"])
    assert again.is_verified is True
    await set_verified(again, False)
    assert len(await list_unverified()) == 1


async def test_unknown_guardian_lookups(db):
    assert await find_guardian(guardian_id="nope") is None
    assert await find_guardian(guardian_id="000000000000000000000000") is None
    assert await find_guardian(email="nobody@example.com") is None
    assert await find_guardian() is None
