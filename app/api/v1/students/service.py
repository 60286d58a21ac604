import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import validators
from app.core.enums import StudentStatus
from app.core.exceptions import DuplicateKey
from app.core.models import Enrollment, Student

from .schemas import StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)


async def next_student_number(db: AsyncSession) -> str:
    """<current year><sequence, at least 4 digits>, e.g. 20250042."""
    year = datetime.utcnow().year
    # longer numbers carry larger sequences; plain string order breaks past 9999
    result = await db.execute(
        select(Student.student_number)
        .where(Student.student_number.like(f"{year}%"))
        .order_by(func.length(Student.student_number).desc(), Student.student_number.desc())
        .limit(1)
    )
    last = result.scalar_one_or_none()
    sequence = int(last[4:]) + 1 if last else 1
    return f"{year}{sequence:04d}"


def build_student(payload: StudentCreate, student_number: str) -> Student:
    return Student(
        first_name=payload.first_name,
        last_name=payload.last_name,
        gender=payload.gender.value,
        birth_date=payload.birth_date,
        bi_number=payload.bi_number,
        student_number=student_number,
        province=payload.province,
        municipality=payload.municipality,
        guardian_name=payload.guardian_name,
        guardian_phone=payload.guardian_phone,
        status=StudentStatus.ACTIVE.value,
    )


async def create_student(
    db: AsyncSession,
    payload: StudentCreate,
) -> StudentResponse:
    if payload.bi_number is not None:
        await validators.ensure_unique(db, Student, {"bi_number": payload.bi_number}, entity="Student")
    student_number = await next_student_number(db)
    try:
        obj = build_student(payload, student_number)
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise DuplicateKey("Student", {"bi_number": payload.bi_number, "student_number": student_number})
    logger.info("Created student %s (%s)", student_number, obj.id)
    return StudentResponse.model_validate(obj)


async def list_students(
    db: AsyncSession,
    class_id: Optional[UUID] = None,
) -> List[StudentResponse]:
    stmt = select(Student)
    if class_id is not None:
        stmt = stmt.where(Student.class_id == class_id)
    stmt = stmt.order_by(Student.first_name, Student.last_name)
    result = await db.execute(stmt)
    return [StudentResponse.model_validate(s) for s in result.scalars().all()]


async def get_student(
    db: AsyncSession,
    student_id: UUID,
) -> Optional[StudentResponse]:
    obj = await db.get(Student, student_id)
    return StudentResponse.model_validate(obj) if obj else None


async def update_student(
    db: AsyncSession,
    student_id: UUID,
    payload: StudentUpdate,
) -> Optional[StudentResponse]:
    obj = await db.get(Student, student_id)
    if not obj:
        return None
    data = payload.model_dump(exclude_unset=True)
    if data.get("bi_number") is not None and data["bi_number"] != obj.bi_number:
        await validators.ensure_unique(
            db, Student, {"bi_number": data["bi_number"]}, exclude_id=student_id, entity="Student"
        )
    for field in ("gender", "status"):
        if data.get(field) is not None:
            data[field] = data[field].value
    for field, value in data.items():
        if value is None and field in ("first_name", "last_name", "gender", "birth_date", "status"):
            continue
        setattr(obj, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateKey("Student", {"bi_number": obj.bi_number})
    await db.refresh(obj)
    logger.info("Updated student %s", student_id)
    return StudentResponse.model_validate(obj)


async def delete_student(
    db: AsyncSession,
    student_id: UUID,
) -> bool:
    obj = await db.get(Student, student_id)
    if not obj:
        return False
    await db.execute(delete(Enrollment).where(Enrollment.student_id == student_id))
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted student %s", student_id)
    return True
