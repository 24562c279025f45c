import uuid


async def test_class_groups_report_occupancy(client, class_group, admin_id, auth_headers, profile_form):
    for _ in range(2):
        created = await client.post(
            f"/api/v1/enrollments/class/{class_group.id}", json=profile_form, headers=auth_headers(uuid.uuid4())
        )
        assert created.status_code == 201
    await client.post(
        f"/api/v1/admin/payments/class/{created.json()['enrollment']['id']}/confirm", headers=auth_headers(admin_id)
    )

    response = await client.get(f"/api/v1/class-groups/{class_group.id}")

    assert response.status_code == 200
    assert response.json()["enrolled"] == 1
    assert response.json()["spots_left"] == 19

    listing = await client.get("/api/v1/class-groups")
    assert [g["id"] for g in listing.json()] == [str(class_group.id)]


async def test_catalog_writes_require_admin(client, member_id, auth_headers):
    payload = {"title": "Python", "price_aoa": 50000}
    anonymous = await client.post("/api/v1/courses", json=payload)
    member = await client.post("/api/v1/courses", json=payload, headers=auth_headers(member_id))
    assert anonymous.status_code == 401
    assert member.status_code == 403


async def test_admin_builds_course_outline(client, admin_id, auth_headers):
    headers = auth_headers(admin_id)
    course = await client.post(
        "/api/v1/courses", json={"title": "Python do Zero", "category": "tech", "price_aoa": 60000}, headers=headers
    )
    assert course.status_code == 201
    course_id = course.json()["id"]

    module = await client.post(f"/api/v1/courses/{course_id}/modules", json={"title": "Fundamentos"}, headers=headers)
    assert module.status_code == 201
    lesson = await client.post(
        f"/api/v1/courses/{course_id}/modules/{module.json()['id']}/lessons",
        json={"title": "Variáveis", "content": "x = 1", "is_free": True},
        headers=headers,
    )
    assert lesson.status_code == 201

    detail = await client.get(f"/api/v1/courses/{course_id}")
    assert detail.status_code == 200
    outline = detail.json()["modules"]
    assert outline[0]["title"] == "Fundamentos"
    assert outline[0]["lessons"][0]["title"] == "Variáveis"
    assert "content" not in outline[0]["lessons"][0]

    listing = await client.get("/api/v1/courses", params={"category": "tech"})
    assert [c["id"] for c in listing.json()] == [course_id]


async def test_lesson_from_another_course_is_not_found(client, admin_id, auth_headers, course, course_lessons):
    other = await client.post("/api/v1/courses", json={"title": "Outro", "price_aoa": 1000}, headers=auth_headers(admin_id))
    free_lesson, _ = course_lessons

    response = await client.get(f"/api/v1/courses/{other.json()['id']}/lessons/{free_lesson.id}")
    assert response.status_code == 404


async def test_free_lesson_is_public(client, course, course_lessons):
    free_lesson, _ = course_lessons
    response = await client.get(f"/api/v1/courses/{course.id}/lessons/{free_lesson.id}")
    assert response.status_code == 200
    assert response.json()["content"] == "Bem-vindo!"


async def test_paid_lesson_requires_confirmed_enrollment(client, course, course_lessons, member_id, admin_id, auth_headers, profile_form):
    _, paid_lesson = course_lessons
    url = f"/api/v1/courses/{course.id}/lessons/{paid_lesson.id}"
    headers = auth_headers(member_id)

    assert (await client.get(url)).status_code == 403
    assert (await client.get(url, headers=headers)).status_code == 403

    created = await client.post(f"/api/v1/enrollments/course/{course.id}", json=profile_form, headers=headers)
    assert (await client.get(url, headers=headers)).status_code == 403

    await client.post(
        f"/api/v1/admin/payments/course/{created.json()['enrollment']['id']}/confirm", headers=auth_headers(admin_id)
    )
    response = await client.get(url, headers=headers)
    assert response.status_code == 200
    assert response.json()["content"] == "Regra 50/30/20"


async def test_price_edit_keeps_existing_enrollment_amount(client, class_group, member_id, admin_id, auth_headers, profile_form):
    created = await client.post(
        f"/api/v1/enrollments/class/{class_group.id}", json=profile_form, headers=auth_headers(member_id)
    )

    edit = await client.patch(
        f"/api/v1/class-groups/{class_group.id}", json={"price_aoa": 150000}, headers=auth_headers(admin_id)
    )
    assert edit.status_code == 200
    assert edit.json()["price_aoa"] == 150000.0

    mine = await client.get(f"/api/v1/enrollments/class/{class_group.id}", headers=auth_headers(member_id))
    assert mine.json()["payment_amount"] == 100000.0
    assert mine.json()["payment_reference"] == created.json()["enrollment"]["payment_reference"]


async def test_class_group_dates_are_validated(client, admin_id, auth_headers):
    response = await client.post(
        "/api/v1/class-groups",
        json={
            "title": "Marketing Digital", "schedule": "Sextas", "format": "online",
            "price_aoa": 20000, "spots": 10, "start_date": "2026-11-10", "end_date": "2026-11-01",
        },
        headers=auth_headers(admin_id),
    )
    assert response.status_code == 422


async def test_mentorships_report_enrolled(client, mentorship):
    response = await client.get("/api/v1/mentorships")
    assert response.status_code == 200
    assert response.json()[0]["enrolled"] == 0
    assert response.json()[0]["max_students"] == 5
