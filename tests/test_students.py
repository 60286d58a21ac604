from datetime import date, datetime
from uuid import uuid4

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.students import service as students_service
from app.core.models import Student


async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "x-process-time" in response.headers


async def test_student_numbers_are_sequential(make_student) -> None:
    first = await make_student()
    second = await make_student(first_name="Maria")
    assert len(first["student_number"]) == 8
    assert int(second["student_number"]) == int(first["student_number"]) + 1


async def test_bi_number_is_normalized_and_unique(client: AsyncClient, make_student) -> None:
    student = await make_student(bi_number="003456789 la042")
    assert student["bi_number"] == "003456789LA042"

    response = await client.post(
        "/api/v1/students",
        json={
            "first_name": "Pedro",
            "last_name": "Kiala",
            "gender": "MASCULINO",
            "birth_date": "2008-07-01",
            "bi_number": "003456789LA042",
        },
    )
    assert response.status_code == 409


async def test_invalid_bi_number_is_rejected(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/students",
        json={
            "first_name": "Rosa",
            "last_name": "Lemos",
            "gender": "FEMININO",
            "birth_date": "2009-01-20",
            "bi_number": "ABC",
        },
    )
    assert response.status_code == 422


async def test_update_student_keeps_own_bi_number(client: AsyncClient, make_student) -> None:
    first = await make_student(bi_number="003456789LA042")
    second = await make_student(bi_number="004567890LA043")

    same = await client.put(
        f"/api/v1/students/{first['id']}",
        json={"bi_number": "003456789la042", "guardian_name": "Maria Manuel"},
    )
    assert same.status_code == 200
    assert same.json()["guardian_name"] == "Maria Manuel"
    assert same.json()["student_number"] == first["student_number"]

    clash = await client.put(f"/api/v1/students/{first['id']}", json={"bi_number": second["bi_number"]})
    assert clash.status_code == 409

    bad = await client.put(f"/api/v1/students/{first['id']}", json={"bi_number": "12AB"})
    assert bad.status_code == 422

    missing = await client.put(f"/api/v1/students/{uuid4()}", json={"first_name": "Pedro"})
    assert missing.status_code == 404


async def test_student_number_sequence_grows_past_four_digits(db_session: AsyncSession) -> None:
    year = datetime.utcnow().year
    for number in (f"{year}9999", f"{year}10000"):
        db_session.add(
            Student(
                first_name="Aluno",
                last_name="Antigo",
                gender="MASCULINO",
                birth_date=date(2008, 1, 1),
                student_number=number,
            )
        )
    await db_session.commit()

    assert await students_service.next_student_number(db_session) == f"{year}10001"


async def test_names_are_stripped_before_length_checks(client: AsyncClient) -> None:
    blank = await client.post(
        "/api/v1/students",
        json={"first_name": "   ", "last_name": "Lemos", "gender": "FEMININO", "birth_date": "2009-01-20"},
    )
    assert blank.status_code == 422

    padded = await client.post(
        "/api/v1/students",
        json={"first_name": "  Rosa ", "last_name": "Lemos", "gender": "FEMININO", "birth_date": "2009-01-20"},
    )
    assert padded.status_code == 201
    assert padded.json()["first_name"] == "Rosa"
