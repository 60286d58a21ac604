from uuid import uuid4

from httpx import AsyncClient


async def test_create_class_with_students_and_teachers(client: AsyncClient, make_students, make_teacher) -> None:
    students = await make_students(3)
    teacher = await make_teacher()
    payload = {
        "name": "10A",
        "year": 2025,
        "shift": "MORNING",
        "capacity": 30,
        "student_ids": [s["id"] for s in students],
        "teacher_ids": [teacher["id"]],
    }

    response = await client.post("/api/v1/classes", json=payload)
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "10A"
    assert data["year"] == 2025
    assert data["shift"] == "MORNING"
    assert set(data["student_ids"]) == {s["id"] for s in students}
    assert data["teacher_ids"] == [teacher["id"]]

    student = (await client.get(f"/api/v1/students/{students[0]['id']}")).json()
    assert student["class_id"] == data["id"]


async def test_create_class_over_capacity_is_rejected(client: AsyncClient) -> None:
    payload = {
        "name": "10B",
        "year": 2025,
        "shift": "AFTERNOON",
        "capacity": 30,
        "student_ids": [str(uuid4()) for _ in range(31)],
    }

    response = await client.post("/api/v1/classes", json=payload)
    assert response.status_code == 400
    assert "exceeds class capacity" in response.json()["detail"]


async def test_class_name_is_unique_per_year(client: AsyncClient, make_class) -> None:
    await make_class(name="10A", year=2025)

    duplicate = await client.post(
        "/api/v1/classes", json={"name": "10A", "year": 2025, "shift": "MORNING", "capacity": 30}
    )
    assert duplicate.status_code == 409

    next_year = await client.post(
        "/api/v1/classes", json={"name": "10A", "year": 2026, "shift": "MORNING", "capacity": 30}
    )
    assert next_year.status_code == 201


async def test_create_class_with_unknown_teacher_names_missing_id(client: AsyncClient, make_teacher) -> None:
    a = await make_teacher(name="Teacher A")
    b = await make_teacher(name="Teacher B")
    missing = str(uuid4())

    response = await client.post(
        "/api/v1/classes",
        json={
            "name": "11A",
            "year": 2025,
            "shift": "EVENING",
            "capacity": 25,
            "teacher_ids": [a["id"], b["id"], missing],
        },
    )
    assert response.status_code == 400
    assert missing in response.json()["detail"]


async def test_student_cannot_sit_in_two_classes(client: AsyncClient, make_class, make_student) -> None:
    student = await make_student()
    await make_class(name="10A", student_ids=[student["id"]])

    response = await client.post(
        "/api/v1/classes",
        json={"name": "10B", "year": 2025, "shift": "MORNING", "capacity": 30, "student_ids": [student["id"]]},
    )
    assert response.status_code == 400


async def test_update_class_uniqueness_excludes_itself(client: AsyncClient, make_class) -> None:
    a = await make_class(name="10A")
    await make_class(name="10B")

    same_name = await client.put(f"/api/v1/classes/{a['id']}", json={"name": "10A", "capacity": 35})
    assert same_name.status_code == 200
    assert same_name.json()["capacity"] == 35

    clash = await client.put(f"/api/v1/classes/{a['id']}", json={"name": "10B"})
    assert clash.status_code == 409

    missing = await client.put(f"/api/v1/classes/{uuid4()}", json={"name": "12A"})
    assert missing.status_code == 404


async def test_update_class_replaces_students(client: AsyncClient, make_class, make_students) -> None:
    first, second, third = await make_students(3)
    cl = await make_class(student_ids=[first["id"], second["id"]])

    response = await client.put(f"/api/v1/classes/{cl['id']}", json={"student_ids": [third["id"]]})
    assert response.status_code == 200
    assert response.json()["student_ids"] == [third["id"]]

    unassigned = (await client.get(f"/api/v1/students/{first['id']}")).json()
    assert unassigned["class_id"] is None


async def test_lowering_capacity_below_current_students_is_rejected(
    client: AsyncClient, make_class, make_students
) -> None:
    students = await make_students(3)
    cl = await make_class(capacity=5, student_ids=[s["id"] for s in students])

    response = await client.put(f"/api/v1/classes/{cl['id']}", json={"capacity": 2})
    assert response.status_code == 400


async def test_delete_class_unassigns_students(client: AsyncClient, make_class, make_student) -> None:
    student = await make_student()
    cl = await make_class(student_ids=[student["id"]])

    response = await client.delete(f"/api/v1/classes/{cl['id']}")
    assert response.status_code == 204

    assert (await client.get(f"/api/v1/classes/{cl['id']}")).status_code == 404
    remaining = await client.get(f"/api/v1/students/{student['id']}")
    assert remaining.status_code == 200
    assert remaining.json()["class_id"] is None


async def test_list_classes_filters_by_year(client: AsyncClient, make_class) -> None:
    await make_class(name="10A", year=2025)
    await make_class(name="10A", year=2026)
    await make_class(name="11A", year=2026)

    all_classes = (await client.get("/api/v1/classes")).json()
    assert [(c["name"], c["year"]) for c in all_classes] == [("10A", 2026), ("11A", 2026), ("10A", 2025)]

    only_2025 = (await client.get("/api/v1/classes", params={"year": 2025})).json()
    assert len(only_2025) == 1


async def test_availability_counts_active_enrollments(client: AsyncClient, make_class, make_student) -> None:
    cl = await make_class(capacity=2)
    student = await make_student()
    await client.post(
        "/api/v1/enrollments",
        json={"student_id": student["id"], "class_id": cl["id"], "year": 2025},
    )

    response = await client.get(f"/api/v1/classes/{cl['id']}/availability")
    assert response.status_code == 200
    assert response.json() == {"capacity": 2, "enrolled": 1, "available": 1, "is_full": False}


async def test_blank_class_name_is_rejected(client: AsyncClient, make_class) -> None:
    blank = await client.post("/api/v1/classes", json={"name": "   ", "year": 2025, "shift": "MORNING", "capacity": 30})
    assert blank.status_code == 422

    cl = await make_class(name="  10C  ")
    assert cl["name"] == "10C"

    rename = await client.put(f"/api/v1/classes/{cl['id']}", json={"name": " "})
    assert rename.status_code == 422
