from conftest import (
    GUARDIAN_PROFILE,
    VITAL_PROFILE,
    act,
    book,
    create_guardian,
    create_vital,
    register,
)


async def test_vital_profile_crud(client):
    headers = await register(client, "crud@example.com", "VITAL")
    assert (await client.get("/api/vital/profile", headers=headers)).status_code == 404

    created = await client.post(
        "/api/vital/profile",
        json={**VITAL_PROFILE, "profile_photo": "/media/p.png"},
        headers=headers,
    )
    assert created.status_code == 201
    assert created.json()["profile_photo"] == "/media/p.png"

    again = await client.post("/api/vital/profile", json=VITAL_PROFILE, headers=headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "Profile already exists"

    updated = await client.put("/api/vital/profile", json={"age": 73, "profile_photo": ""}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["age"] == 73
    assert updated.json()["name"] == VITAL_PROFILE["name"]
    assert updated.json()["profile_photo"] is None

    assert (await client.delete("/api/vital/profile", headers=headers)).status_code == 200
    assert (await client.get("/api/vital/profile", headers=headers)).status_code == 404


async def test_vital_profile_validation(client):
    headers = await register(client, "bad@example.com", "VITAL")
    for bad in ({"age": 0}, {"gender": "Robot"}, {"location": {"city": "  "}}, {"contact_preference": "Fax"}):
        resp = await client.post("/api/vital/profile", json={**VITAL_PROFILE, **bad}, headers=headers)
        assert resp.status_code == 422, bad


async def test_guardian_profile_validation(client):
    headers = await register(client, "gbad@example.com", "GUARDIAN")
    bad_cases = [
        {"age": 17},
        {"specialization": []},
        {"introduction": "x" * 301},
        {"service_radius": 0},
        {"availability": {"days": ["Funday"], "hours": {"start": "08:00", "end": "17:00"}}},
        {"availability": {"days": ["Monday"], "hours": {"start": "8am", "end": "17:00"}}},
    ]
    for bad in bad_cases:
        resp = await client.post("/api/guardian/profile", json={**GUARDIAN_PROFILE, **bad}, headers=headers)
        assert resp.status_code == 422, bad


async def test_profile_updates_keep_required_fields(client):
    vital_headers, _ = await create_vital(client)
    resp = await client.put("/api/vital/profile", json={"name": "   ", "health_needs": ""}, headers=vital_headers)
    assert resp.status_code == 400
    stored = (await client.get("/api/vital/profile", headers=vital_headers)).json()
    assert stored["name"] == VITAL_PROFILE["name"]
    assert stored["health_needs"] == VITAL_PROFILE["health_needs"]

    trimmed = await client.put("/api/vital/profile", json={"name": "  Victor P.  "}, headers=vital_headers)
    assert trimmed.status_code == 200
    assert trimmed.json()["name"] == "Victor P."

    guardian_headers, _ = await create_guardian(client)
    resp = await client.put("/api/guardian/profile", json={"specialization": ["  "]}, headers=guardian_headers)
    assert resp.status_code == 400
    stored = (await client.get("/api/guardian/profile", headers=guardian_headers)).json()
    assert stored["specialization"] == GUARDIAN_PROFILE["specialization"]


async def test_null_clears_only_optional_profile_fields(client):
    headers, _ = await create_guardian(client)
    resp = await client.put(
        "/api/guardian/profile",
        json={"introduction": None, "location": None, "name": None},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["introduction"] is None
    assert resp.json()["location"] is None
    assert resp.json()["name"] == GUARDIAN_PROFILE["name"]


async def test_guardian_profile_hides_phone_and_updates(client):
    headers, guardian = await create_guardian(client)
    assert "phone_number" not in guardian
    assert guardian["is_verified"] is False

    resp = await client.put("/api/guardian/profile", json={"experience": 9, "languages": ["Tamil"]}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["experience"] == 9
    assert resp.json()["languages"] == ["Tamil"]
    assert resp.json()["specialization"] == GUARDIAN_PROFILE["specialization"]


async def test_browse_guardians_with_filters_and_ratings(client):
    vital_headers, _ = await create_vital(client)
    await create_guardian(client, email="g1@example.com", name="Colombo Carer")
    await create_guardian(
        client,
        email="g2@example.com",
        name="Kandy Carer",
        specialization=["Physiotherapy"],
        location={"city": "Kandy"},
    )

    everyone = await client.get("/api/guardians", headers=vital_headers)
    assert everyone.status_code == 200
    assert len(everyone.json()) == 2
    assert all(g["review_count"] == 0 and g["average_rating"] is None for g in everyone.json())

    kandy = await client.get("/api/guardians", params={"city": "kandy"}, headers=vital_headers)
    assert [g["name"] for g in kandy.json()] == ["Kandy Carer"]

    verified = await client.get("/api/guardians", params={"verified": "true"}, headers=vital_headers)
    assert verified.json() == []


async def test_guardian_detail_includes_metrics(client, pair):
    vital_headers, _, _, guardian = pair
    resp = await client.get(f"/api/guardians/{guardian['id']}", headers=vital_headers)
    assert resp.status_code == 200
    metrics = resp.json()["metrics"]
    assert metrics["response_label"] == "Response time not available"
    assert metrics["availability"]["shift_type"] == "Morning"
    assert metrics["badges"]["highly_rated"] is False

    missing = await client.get("/api/guardians/000000000000000000000000", headers=vital_headers)
    assert missing.status_code == 404


async def test_guardian_own_metrics(client, pair):
    vital_headers, _, guardian_headers, guardian = pair
    booking = await book(client, vital_headers, guardian["id"])
    await act(client, guardian_headers, booking["id"], "accept")
    await act(client, guardian_headers, booking["id"], "complete")

    resp = await client.get("/api/guardian/metrics", headers=guardian_headers)
    assert resp.status_code == 200
    assert resp.json()["reliability_score"] == 100
    assert resp.json()["reliability_label"] == "100% bookings completed"


async def test_contact_requires_active_booking(client, pair):
    vital_headers, _, guardian_headers, guardian = pair
    url = f"/api/guardians/{guardian['id']}/contact"

    assert (await client.get(url, headers=vital_headers)).status_code == 403

    booking = await book(client, vital_headers, guardian["id"])
    assert (await client.get(url, headers=vital_headers)).status_code == 403

    await act(client, guardian_headers, booking["id"], "accept")
    resp = await client.get(url, headers=vital_headers)
    assert resp.status_code == 200
    assert resp.json() == {"email": "guardian@example.com", "phone_number": "0771234567"}

    await act(client, guardian_headers, booking["id"], "complete")
    assert (await client.get(url, headers=vital_headers)).status_code == 403


async def test_guardian_sees_only_vitals_who_booked(client, pair):
    vital_headers, vital, guardian_headers, guardian = pair
    url = f"/api/vitals/{vital['id']}"
    assert (await client.get(url, headers=guardian_headers)).status_code == 404

    await book(client, vital_headers, guardian["id"])
    resp = await client.get(url, headers=guardian_headers)
    assert resp.status_code == 200
    assert resp.json()["health_needs"] == VITAL_PROFILE["health_needs"]


async def test_saved_guardians_are_unique(client, pair):
    vital_headers, _, _, guardian = pair

    first = await client.post("/api/vital/saved-guardians", json={"guardian_id": guardian["id"]}, headers=vital_headers)
    assert first.status_code == 201
    dup = await client.post("/api/vital/saved-guardians", json={"guardian_id": guardian["id"]}, headers=vital_headers)
    assert dup.status_code == 400

    listed = await client.get("/api/vital/saved-guardians", headers=vital_headers)
    assert [g["id"] for g in listed.json()] == [guardian["id"]]

    removed = await client.delete("/api/vital/saved-guardians", params={"guardian_id": guardian["id"]}, headers=vital_headers)
    assert removed.status_code == 200
    assert (await client.get("/api/vital/saved-guardians", headers=vital_headers)).json() == []

    missing = await client.post(
        "/api/vital/saved-guardians",
        json={"guardian_id": "000000000000000000000000"},
        headers=vital_headers,
    )
    assert missing.status_code == 404
