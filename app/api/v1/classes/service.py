import logging
from typing import List, Optional, Sequence, Set
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core import validators
from app.core.enums import EnrollmentStatus
from app.core.exceptions import DuplicateKey, ServiceError
from app.core.models import Enrollment, SchoolClass, Student, Teacher

from .schemas import ClassAvailabilityResponse, ClassCreate, ClassResponse, ClassUpdate

logger = logging.getLogger(__name__)


def _class_to_response(c: SchoolClass) -> ClassResponse:
    return ClassResponse(
        id=c.id,
        name=c.name,
        year=c.year,
        shift=c.shift,
        capacity=c.capacity,
        student_ids=[s.id for s in c.students],
        teacher_ids=[t.id for t in c.teachers],
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


def _with_members(stmt):
    return stmt.options(
        selectinload(SchoolClass.students),
        selectinload(SchoolClass.teachers),
    ).execution_options(populate_existing=True)


async def _load_class(db: AsyncSession, class_id: UUID) -> Optional[SchoolClass]:
    result = await db.execute(_with_members(select(SchoolClass).where(SchoolClass.id == class_id)))
    return result.scalar_one_or_none()


def ensure_students_unassigned(students: Sequence[Student], class_id: Optional[UUID] = None) -> None:
    """Students may move into class_id only from no class (or from class_id itself)."""
    taken = [s.id for s in students if s.class_id is not None and s.class_id != class_id]
    if taken:
        raise ServiceError(
            "One or more students are already assigned to another class",
            status.HTTP_400_BAD_REQUEST,
        )


async def create_class(
    db: AsyncSession,
    payload: ClassCreate,
) -> ClassResponse:
    name = payload.name
    key = {"name": name, "year": payload.year}
    student_ids = payload.student_ids or []
    teacher_ids = payload.teacher_ids or []

    await validators.ensure_unique(db, SchoolClass, key, entity="Class")
    validators.validate_capacity(payload.capacity, len(set(student_ids)))
    students = await validators.ensure_all_exist(db, Student, student_ids, entity="Student")
    ensure_students_unassigned(students)
    teachers = await validators.ensure_all_exist(db, Teacher, teacher_ids, entity="Teacher")

    obj = SchoolClass(
        name=name,
        year=payload.year,
        shift=payload.shift.value,
        capacity=payload.capacity,
        teachers=teachers,
    )
    try:
        db.add(obj)
        await db.flush()
        for student in students:
            student.class_id = obj.id
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateKey("Class", key)
    logger.info("Created class %s (%s) with %d students", name, payload.year, len(students))
    return _class_to_response(await _load_class(db, obj.id))


async def list_classes(
    db: AsyncSession,
    year: Optional[int] = None,
) -> List[ClassResponse]:
    stmt = select(SchoolClass)
    if year is not None:
        stmt = stmt.where(SchoolClass.year == year)
    stmt = stmt.order_by(SchoolClass.year.desc(), SchoolClass.name)
    result = await db.execute(_with_members(stmt))
    return [_class_to_response(c) for c in result.scalars().all()]


async def get_class(
    db: AsyncSession,
    class_id: UUID,
) -> Optional[ClassResponse]:
    obj = await _load_class(db, class_id)
    return _class_to_response(obj) if obj else None


async def update_class(
    db: AsyncSession,
    class_id: UUID,
    payload: ClassUpdate,
) -> Optional[ClassResponse]:
    obj = await _load_class(db, class_id)
    if not obj:
        return None

    name = payload.name if payload.name is not None else obj.name
    year = payload.year if payload.year is not None else obj.year
    key = {"name": name, "year": year}
    if (name, year) != (obj.name, obj.year):
        await validators.ensure_unique(db, SchoolClass, key, exclude_id=class_id, entity="Class")

    capacity = payload.capacity if payload.capacity is not None else obj.capacity
    if payload.student_ids is not None:
        # active enrollments keep their seats even when the member list is replaced
        candidates = set(payload.student_ids) | await active_enrolled_ids(db, class_id)
        validators.validate_capacity(capacity, len(candidates))
    elif payload.capacity is not None:
        validators.validate_capacity(capacity, len(await occupant_ids(db, class_id)))

    students: List[Student] = []
    if payload.student_ids is not None:
        students = await validators.ensure_all_exist(db, Student, payload.student_ids, entity="Student")
        ensure_students_unassigned(students, class_id)
    if payload.teacher_ids is not None:
        obj.teachers = await validators.ensure_all_exist(db, Teacher, payload.teacher_ids, entity="Teacher")

    obj.name = name
    obj.year = year
    obj.capacity = capacity
    if payload.shift is not None:
        obj.shift = payload.shift.value

    if payload.student_ids is not None:
        # unassign everyone, then place the new list
        await db.execute(update(Student).where(Student.class_id == class_id).values(class_id=None))
        if students:
            await db.execute(
                update(Student).where(Student.id.in_([s.id for s in students])).values(class_id=class_id)
            )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateKey("Class", key)
    logger.info("Updated class %s", class_id)
    return _class_to_response(await _load_class(db, class_id))


async def delete_class(
    db: AsyncSession,
    class_id: UUID,
) -> bool:
    """Delete a class. Its students are unassigned, not deleted."""
    obj = await _load_class(db, class_id)
    if not obj:
        return False
    await db.execute(update(Student).where(Student.class_id == class_id).values(class_id=None))
    await db.execute(delete(Enrollment).where(Enrollment.class_id == class_id))
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted class %s", class_id)
    return True


async def active_enrolled_ids(
    db: AsyncSession,
    class_id: UUID,
) -> Set[UUID]:
    result = await db.execute(
        select(Enrollment.student_id).where(
            Enrollment.class_id == class_id,
            Enrollment.status == EnrollmentStatus.ACTIVE.value,
        )
    )
    return set(result.scalars().all())


async def occupant_ids(
    db: AsyncSession,
    class_id: UUID,
) -> Set[UUID]:
    """Students holding a seat: placed in the class or actively enrolled in it, each counted once."""
    result = await db.execute(select(Student.id).where(Student.class_id == class_id))
    return set(result.scalars().all()) | await active_enrolled_ids(db, class_id)


async def check_availability(
    db: AsyncSession,
    class_id: UUID,
) -> Optional[ClassAvailabilityResponse]:
    obj = await db.get(SchoolClass, class_id)
    if not obj:
        return None
    enrolled = len(await occupant_ids(db, class_id))
    available = obj.capacity - enrolled
    return ClassAvailabilityResponse(
        capacity=obj.capacity,
        enrolled=enrolled,
        available=available,
        is_full=available <= 0,
    )
