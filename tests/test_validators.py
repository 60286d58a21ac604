from datetime import time
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import validators
from app.core.enums import Weekday
from app.core.exceptions import (
    CapacityExceeded,
    DuplicateKey,
    InvalidTimeRange,
    MissingReferences,
    ScheduleConflict,
)
from app.core.models import ScheduleEntry, SchoolClass, Subject, Teacher, User


@pytest.mark.parametrize("candidate_count", [0, 1, 29, 30])
def test_capacity_accepts_up_to_capacity(candidate_count: int) -> None:
    validators.validate_capacity(30, candidate_count)


@pytest.mark.parametrize("candidate_count", [31, 45])
def test_capacity_rejects_over_capacity(candidate_count: int) -> None:
    with pytest.raises(CapacityExceeded) as exc:
        validators.validate_capacity(30, candidate_count)
    assert exc.value.status_code == 400
    assert exc.value.capacity == 30
    assert exc.value.candidate_count == candidate_count


@pytest.mark.parametrize(
    "first, second, expected",
    [
        ((time(8, 0), time(9, 30)), (time(9, 0), time(10, 0)), True),
        ((time(8, 0), time(9, 30)), (time(9, 30), time(10, 30)), False),
        ((time(9, 30), time(10, 30)), (time(8, 0), time(9, 30)), False),
        ((time(8, 0), time(12, 0)), (time(9, 0), time(10, 0)), True),
        ((time(9, 0), time(10, 0)), (time(8, 0), time(12, 0)), True),
        ((time(8, 0), time(9, 0)), (time(8, 0), time(9, 0)), True),
        ((time(7, 0), time(8, 0)), (time(10, 0), time(11, 0)), False),
    ],
)
def test_intervals_overlap(first, second, expected) -> None:
    assert validators.intervals_overlap(*first, *second) is expected
    assert validators.intervals_overlap(*second, *first) is expected


@pytest.mark.parametrize("start, end", [(time(9, 0), time(9, 0)), (time(10, 0), time(9, 0))])
def test_time_range_rejects_empty_and_inverted(start: time, end: time) -> None:
    with pytest.raises(InvalidTimeRange):
        validators.validate_time_range(start, end)


async def _teacher(db: AsyncSession, email: str) -> Teacher:
    user = User(name="Professor", email=email, role="PROFESSOR")
    db.add(user)
    await db.flush()
    teacher = Teacher(user_id=user.id)
    db.add(teacher)
    await db.commit()
    return teacher


async def test_ensure_unique_respects_exclude_id(db_session: AsyncSession) -> None:
    cl = SchoolClass(name="10A", year=2025, shift="MORNING", capacity=30)
    db_session.add(cl)
    await db_session.commit()

    with pytest.raises(DuplicateKey) as exc:
        await validators.ensure_unique(db_session, SchoolClass, {"name": "10A", "year": 2025}, entity="Class")
    assert exc.value.status_code == 409
    assert exc.value.existing_id == cl.id

    await validators.ensure_unique(db_session, SchoolClass, {"name": "10A", "year": 2025}, exclude_id=cl.id)
    await validators.ensure_unique(db_session, SchoolClass, {"name": "10A", "year": 2026})


async def test_ensure_all_exist_reports_missing_ids(db_session: AsyncSession) -> None:
    a = await _teacher(db_session, "a@escola.ao")
    b = await _teacher(db_session, "b@escola.ao")
    c = uuid4()

    rows = await validators.ensure_all_exist(db_session, Teacher, [a.id, b.id, a.id])
    assert {r.id for r in rows} == {a.id, b.id}

    with pytest.raises(MissingReferences) as exc:
        await validators.ensure_all_exist(db_session, Teacher, [a.id, b.id, c], entity="Teacher")
    assert exc.value.status_code == 400
    assert exc.value.missing_ids == [c]

    assert await validators.ensure_all_exist(db_session, Teacher, []) == []


async def test_schedule_conflict_same_teacher_same_weekday_only(db_session: AsyncSession) -> None:
    teacher = await _teacher(db_session, "prof@escola.ao")
    other = await _teacher(db_session, "outro@escola.ao")
    subject = Subject(name="Física", code="FIS10")
    db_session.add(subject)
    await db_session.flush()
    entry = ScheduleEntry(
        teacher_id=teacher.id,
        subject_id=subject.id,
        weekday="SEGUNDA",
        start_time=time(8, 0),
        end_time=time(9, 30),
    )
    db_session.add(entry)
    await db_session.commit()

    with pytest.raises(ScheduleConflict) as exc:
        await validators.ensure_no_schedule_conflict(
            db_session, teacher.id, Weekday.SEGUNDA, time(9, 0), time(10, 0)
        )
    assert exc.value.conflicting_ids == [entry.id]

    await validators.ensure_no_schedule_conflict(db_session, teacher.id, Weekday.SEGUNDA, time(9, 30), time(10, 30))
    await validators.ensure_no_schedule_conflict(db_session, teacher.id, Weekday.TERCA, time(9, 0), time(10, 0))
    await validators.ensure_no_schedule_conflict(db_session, other.id, Weekday.SEGUNDA, time(9, 0), time(10, 0))
    await validators.ensure_no_schedule_conflict(
        db_session, teacher.id, "SEGUNDA", time(8, 30), time(9, 0), exclude_schedule_id=entry.id
    )


async def test_schedule_conflict_checks_time_range_first(db_session: AsyncSession) -> None:
    with pytest.raises(InvalidTimeRange):
        await validators.ensure_no_schedule_conflict(db_session, uuid4(), Weekday.QUARTA, time(11, 0), time(10, 0))
