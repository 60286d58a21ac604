import logging
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import validators
from app.core.enums import EnrollmentStatus
from app.core.exceptions import DuplicateKey, ServiceError
from app.core.models import Enrollment, SchoolClass, Student

from app.api.v1.classes import service as classes_service
from app.api.v1.students import service as students_service
from app.api.v1.students.schemas import StudentCreate, StudentResponse

from .schemas import (
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentUpdate,
    EnrollmentWithStudentCreate,
    EnrollmentWithStudentResponse,
)

logger = logging.getLogger(__name__)

ACTIVE = EnrollmentStatus.ACTIVE.value


async def _get_class_or_404(db: AsyncSession, class_id: UUID) -> SchoolClass:
    cl = await db.get(SchoolClass, class_id)
    if not cl:
        raise ServiceError(f"Class {class_id} not found", status.HTTP_404_NOT_FOUND)
    return cl


async def _ensure_seat(
    db: AsyncSession,
    cl: SchoolClass,
    student_id: Optional[UUID] = None,
) -> None:
    """The student must fit among the class's occupants. A new student (no id yet) takes one more seat."""
    occupants = await classes_service.occupant_ids(db, cl.id)
    if student_id is None or student_id not in occupants:
        validators.validate_capacity(cl.capacity, len(occupants) + 1)


async def _ensure_single_active(
    db: AsyncSession,
    student_id: UUID,
    year: int,
    exclude_id: Optional[UUID] = None,
) -> None:
    await validators.ensure_unique(
        db,
        Enrollment,
        {"student_id": student_id, "year": year, "status": ACTIVE},
        exclude_id=exclude_id,
        entity="Active enrollment",
    )


async def _release_seat(
    db: AsyncSession,
    student_id: UUID,
    class_id: UUID,
    enrollment_id: UUID,
) -> None:
    """Take the student out of class_id once no other ACTIVE enrollment keeps them there."""
    student = await db.get(Student, student_id)
    if not student or student.class_id != class_id:
        return
    result = await db.execute(
        select(Enrollment.id)
        .where(
            Enrollment.student_id == student_id,
            Enrollment.class_id == class_id,
            Enrollment.status == ACTIVE,
            Enrollment.id != enrollment_id,
        )
        .limit(1)
    )
    if result.scalar_one_or_none() is None:
        student.class_id = None


async def create_enrollment(
    db: AsyncSession,
    payload: EnrollmentCreate,
) -> EnrollmentResponse:
    student = await db.get(Student, payload.student_id)
    if not student:
        raise ServiceError(f"Student {payload.student_id} not found", status.HTTP_404_NOT_FOUND)
    cl = await _get_class_or_404(db, payload.class_id)
    if payload.status == EnrollmentStatus.ACTIVE:
        await _ensure_single_active(db, student.id, payload.year)
        classes_service.ensure_students_unassigned([student], cl.id)
        await _ensure_seat(db, cl, student.id)
        student.class_id = cl.id

    obj = Enrollment(
        student_id=payload.student_id,
        class_id=payload.class_id,
        year=payload.year,
        status=payload.status.value,
    )
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info("Enrolled student %s in class %s for %s", payload.student_id, payload.class_id, payload.year)
    return EnrollmentResponse.model_validate(obj)


async def _find_reusable_student(db: AsyncSession, data: StudentCreate) -> Optional[Student]:
    """
    Resolve the student of an enroll-with-student request.

    A matching BI number means the student is already registered and is reused.
    Without one, a student with the same name and birth date is a likely
    duplicate and is rejected. Returns None when a new student must be created.
    """
    if data.bi_number is not None:
        result = await db.execute(select(Student).where(Student.bi_number == data.bi_number))
        existing = result.scalar_one_or_none()
        if existing is not None:
            logger.info("Reusing student %s found by BI %s", existing.id, data.bi_number)
            return existing

    result = await db.execute(
        select(Student)
        .where(
            func.lower(Student.first_name) == data.first_name.lower(),
            func.lower(Student.last_name) == data.last_name.lower(),
            Student.birth_date == data.birth_date,
        )
        .limit(1)
    )
    twin = result.scalars().first()
    if twin is not None:
        raise DuplicateKey(
            "Student",
            {
                "first_name": data.first_name,
                "last_name": data.last_name,
                "birth_date": data.birth_date.isoformat(),
            },
            twin.id,
        )
    return None


async def create_enrollment_with_student(
    db: AsyncSession,
    payload: EnrollmentWithStudentCreate,
) -> EnrollmentWithStudentResponse:
    """Enroll a student given by personal data, registering them first when they are new."""
    cl = await _get_class_or_404(db, payload.class_id)
    student = await _find_reusable_student(db, payload.student)
    active = payload.status == EnrollmentStatus.ACTIVE

    # every check runs before anything is added to the session
    if student is not None and active:
        await _ensure_single_active(db, student.id, payload.year)
        classes_service.ensure_students_unassigned([student], cl.id)
    if active:
        await _ensure_seat(db, cl, student.id if student is not None else None)

    created = student is None
    if created:
        student = students_service.build_student(
            payload.student, await students_service.next_student_number(db)
        )
        db.add(student)
        await db.flush()
    if active:
        student.class_id = cl.id

    obj = Enrollment(
        student_id=student.id,
        class_id=cl.id,
        year=payload.year,
        status=payload.status.value,
    )
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    await db.refresh(student)
    logger.info(
        "Enrolled %s student %s in class %s for %s",
        "new" if created else "existing",
        student.id,
        cl.id,
        payload.year,
    )
    return EnrollmentWithStudentResponse(
        enrollment=EnrollmentResponse.model_validate(obj),
        student=StudentResponse.model_validate(student),
        student_created=created,
    )


async def list_enrollments(
    db: AsyncSession,
    year: Optional[int] = None,
    class_id: Optional[UUID] = None,
    student_id: Optional[UUID] = None,
) -> List[EnrollmentResponse]:
    stmt = select(Enrollment)
    if year is not None:
        stmt = stmt.where(Enrollment.year == year)
    if class_id is not None:
        stmt = stmt.where(Enrollment.class_id == class_id)
    if student_id is not None:
        stmt = stmt.where(Enrollment.student_id == student_id)
    stmt = stmt.order_by(Enrollment.year.desc(), Enrollment.created_at.desc())
    result = await db.execute(stmt)
    return [EnrollmentResponse.model_validate(e) for e in result.scalars().all()]


async def list_years(db: AsyncSession) -> List[str]:
    """Academic years that have enrollments, newest first, as "2025/2026"."""
    result = await db.execute(select(Enrollment.year).distinct().order_by(Enrollment.year.desc()))
    return [f"{year}/{year + 1}" for year in result.scalars().all()]


async def get_enrollment(
    db: AsyncSession,
    enrollment_id: UUID,
) -> Optional[EnrollmentResponse]:
    obj = await db.get(Enrollment, enrollment_id)
    return EnrollmentResponse.model_validate(obj) if obj else None


async def update_enrollment(
    db: AsyncSession,
    enrollment_id: UUID,
    payload: EnrollmentUpdate,
) -> Optional[EnrollmentResponse]:
    obj = await db.get(Enrollment, enrollment_id)
    if not obj:
        return None
    previous_status, previous_class_id = obj.status, obj.class_id
    target_status = payload.status.value if payload.status is not None else obj.status
    target_class_id = payload.class_id if payload.class_id is not None else obj.class_id
    cl = await _get_class_or_404(db, target_class_id)

    moving = target_class_id != obj.class_id
    reactivating = target_status == ACTIVE and obj.status != ACTIVE
    student = await db.get(Student, obj.student_id)
    if reactivating:
        await _ensure_single_active(db, obj.student_id, obj.year, exclude_id=enrollment_id)
    if target_status == ACTIVE and (moving or reactivating):
        # the class this enrollment already holds does not count as another class
        if student is not None and student.class_id != obj.class_id:
            classes_service.ensure_students_unassigned([student], target_class_id)
        await _ensure_seat(db, cl, obj.student_id)

    obj.status = target_status
    obj.class_id = target_class_id
    if target_status == ACTIVE and (moving or reactivating):
        if student is not None:
            student.class_id = target_class_id
    elif previous_status == ACTIVE and (moving or target_status != ACTIVE):
        await _release_seat(db, obj.student_id, previous_class_id, enrollment_id)
    await db.commit()
    await db.refresh(obj)
    logger.info("Updated enrollment %s (status=%s, class=%s)", enrollment_id, target_status, target_class_id)
    return EnrollmentResponse.model_validate(obj)


async def cancel_enrollment(
    db: AsyncSession,
    enrollment_id: UUID,
) -> Optional[EnrollmentResponse]:
    """Enrollments are never deleted; cancelling frees the seat and the student's class placement."""
    obj = await db.get(Enrollment, enrollment_id)
    if not obj:
        return None
    was_active = obj.status == ACTIVE
    obj.status = EnrollmentStatus.CANCELLED.value
    if was_active:
        await _release_seat(db, obj.student_id, obj.class_id, enrollment_id)
    await db.commit()
    await db.refresh(obj)
    logger.info("Cancelled enrollment %s", enrollment_id)
    return EnrollmentResponse.model_validate(obj)
