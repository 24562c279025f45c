import uuid


async def test_profile_missing_until_saved(client, member_id, auth_headers):
    response = await client.get("/api/v1/profiles/me", headers=auth_headers(member_id))
    assert response.status_code == 404


async def test_partial_update_creates_incomplete_profile(client, member_id, auth_headers):
    headers = auth_headers(member_id)

    response = await client.put("/api/v1/profiles/me", json={"full_name": "João Baptista"}, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == str(member_id)
    assert body["full_name"] == "João Baptista"
    assert body["is_complete"] is False


async def test_profile_is_complete_after_enrollment_form(client, course, member_id, auth_headers, profile_form):
    headers = auth_headers(member_id)
    await client.post(f"/api/v1/enrollments/course/{course.id}", json=profile_form, headers=headers)

    response = await client.get("/api/v1/profiles/me", headers=headers)

    assert response.status_code == 200
    assert response.json()["is_complete"] is True
    assert response.json()["id_number"] == profile_form["id_number"]


async def test_update_only_touches_sent_fields(client, course, member_id, auth_headers, profile_form):
    headers = auth_headers(member_id)
    await client.post(f"/api/v1/enrollments/course/{course.id}", json=profile_form, headers=headers)

    response = await client.put("/api/v1/profiles/me", json={"city": "Huambo", "province": "Huambo"}, headers=headers)

    body = response.json()
    assert body["city"] == "Huambo"
    assert body["full_name"] == profile_form["full_name"]
    assert body["is_complete"] is True


async def test_unknown_province_is_rejected(client, member_id, auth_headers):
    response = await client.put("/api/v1/profiles/me", json={"province": "Lisboa"}, headers=auth_headers(member_id))
    assert response.status_code == 422


async def test_members_only_see_their_own_profile(client, member_id, auth_headers, profile_form, course):
    await client.post(f"/api/v1/enrollments/course/{course.id}", json=profile_form, headers=auth_headers(member_id))

    other = await client.get("/api/v1/profiles/me", headers=auth_headers(uuid.uuid4()))
    assert other.status_code == 404
