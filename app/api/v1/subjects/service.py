import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core import validators
from app.core.exceptions import DuplicateKey
from app.core.models import ScheduleEntry, Subject, Teacher

from .schemas import SubjectCreate, SubjectResponse, SubjectUpdate

logger = logging.getLogger(__name__)


def _to_response(s: Subject) -> SubjectResponse:
    return SubjectResponse(
        id=s.id,
        name=s.name,
        code=s.code,
        description=s.description,
        category=s.category,
        workload_hours=s.workload_hours,
        credits=s.credits,
        teacher_ids=[t.id for t in s.teachers],
        created_at=s.created_at,
    )


def _with_teachers(stmt):
    return stmt.options(selectinload(Subject.teachers)).execution_options(populate_existing=True)


async def _load_subject(db: AsyncSession, subject_id: UUID) -> Optional[Subject]:
    result = await db.execute(_with_teachers(select(Subject).where(Subject.id == subject_id)))
    return result.scalar_one_or_none()


async def _ensure_name_and_code_free(
    db: AsyncSession,
    name: str,
    code: str,
    exclude_subject_id: Optional[UUID] = None,
) -> None:
    await validators.ensure_unique(db, Subject, {"name": name}, exclude_id=exclude_subject_id, entity="Subject")
    await validators.ensure_unique(db, Subject, {"code": code}, exclude_id=exclude_subject_id, entity="Subject")


async def create_subject(
    db: AsyncSession,
    payload: SubjectCreate,
) -> SubjectResponse:
    name = payload.name
    code = payload.code.upper()
    await _ensure_name_and_code_free(db, name, code)
    teachers = await validators.ensure_all_exist(db, Teacher, payload.teacher_ids or [], entity="Teacher")
    try:
        obj = Subject(
            name=name,
            code=code,
            description=payload.description,
            category=payload.category.value,
            workload_hours=payload.workload_hours,
            credits=payload.credits,
            teachers=teachers,
        )
        db.add(obj)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateKey("Subject", {"name": name, "code": code})
    logger.info("Created subject %s (%s)", name, code)
    return _to_response(await _load_subject(db, obj.id))


async def list_subjects(db: AsyncSession) -> List[SubjectResponse]:
    result = await db.execute(_with_teachers(select(Subject).order_by(Subject.name)))
    return [_to_response(s) for s in result.scalars().all()]


async def get_subject(
    db: AsyncSession,
    subject_id: UUID,
) -> Optional[SubjectResponse]:
    obj = await _load_subject(db, subject_id)
    return _to_response(obj) if obj else None


async def update_subject(
    db: AsyncSession,
    subject_id: UUID,
    payload: SubjectUpdate,
) -> Optional[SubjectResponse]:
    obj = await _load_subject(db, subject_id)
    if not obj:
        return None
    name = payload.name if payload.name is not None else obj.name
    code = payload.code.upper() if payload.code is not None else obj.code
    if name != obj.name:
        await validators.ensure_unique(db, Subject, {"name": name}, exclude_id=subject_id, entity="Subject")
    if code != obj.code:
        await validators.ensure_unique(db, Subject, {"code": code}, exclude_id=subject_id, entity="Subject")
    if payload.teacher_ids is not None:
        obj.teachers = await validators.ensure_all_exist(db, Teacher, payload.teacher_ids, entity="Teacher")

    obj.name = name
    obj.code = code
    if payload.description is not None:
        obj.description = payload.description
    if payload.category is not None:
        obj.category = payload.category.value
    if payload.workload_hours is not None:
        obj.workload_hours = payload.workload_hours
    if payload.credits is not None:
        obj.credits = payload.credits
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateKey("Subject", {"name": name, "code": code})
    logger.info("Updated subject %s", subject_id)
    return _to_response(await _load_subject(db, subject_id))


async def delete_subject(
    db: AsyncSession,
    subject_id: UUID,
) -> bool:
    obj = await _load_subject(db, subject_id)
    if not obj:
        return False
    await db.execute(delete(ScheduleEntry).where(ScheduleEntry.subject_id == subject_id))
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted subject %s", subject_id)
    return True


async def list_subjects_by_teacher(
    db: AsyncSession,
    teacher_id: UUID,
) -> List[SubjectResponse]:
    stmt = (
        select(Subject)
        .where(Subject.teachers.any(Teacher.id == teacher_id))
        .order_by(Subject.name)
    )
    result = await db.execute(_with_teachers(stmt))
    return [_to_response(s) for s in result.scalars().all()]
