import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core import validators
from app.core.enums import UserRole
from app.core.exceptions import DuplicateKey
from app.core.models import ScheduleEntry, Subject, Teacher, User

from .schemas import TeacherCreate, TeacherResponse, TeacherUpdate

logger = logging.getLogger(__name__)


def _to_response(t: Teacher) -> TeacherResponse:
    return TeacherResponse(
        id=t.id,
        user_id=t.user_id,
        name=t.user.name,
        email=t.user.email,
        specialization=t.specialization,
        bio=t.bio,
        subject_ids=[s.id for s in t.subjects],
        created_at=t.created_at,
    )


def _with_relations(stmt):
    return stmt.options(
        selectinload(Teacher.user),
        selectinload(Teacher.subjects),
        selectinload(Teacher.classes),
    ).execution_options(populate_existing=True)


async def _load_teacher(db: AsyncSession, teacher_id: UUID) -> Optional[Teacher]:
    result = await db.execute(_with_relations(select(Teacher).where(Teacher.id == teacher_id)))
    return result.scalar_one_or_none()


async def create_teacher(
    db: AsyncSession,
    payload: TeacherCreate,
) -> TeacherResponse:
    email = payload.email.lower()
    await validators.ensure_unique(db, User, {"email": email}, entity="User")
    subjects = await validators.ensure_all_exist(db, Subject, payload.subject_ids or [], entity="Subject")
    try:
        user = User(name=payload.name, email=email, role=UserRole.PROFESSOR.value)
        db.add(user)
        await db.flush()
        obj = Teacher(
            user_id=user.id,
            specialization=payload.specialization,
            bio=payload.bio,
            subjects=subjects,
        )
        db.add(obj)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateKey("User", {"email": email})
    logger.info("Created teacher %s <%s>", payload.name, email)
    return _to_response(await _load_teacher(db, obj.id))


async def list_teachers(db: AsyncSession) -> List[TeacherResponse]:
    result = await db.execute(_with_relations(select(Teacher).order_by(Teacher.created_at.desc())))
    return [_to_response(t) for t in result.scalars().all()]


async def get_teacher(
    db: AsyncSession,
    teacher_id: UUID,
) -> Optional[TeacherResponse]:
    obj = await _load_teacher(db, teacher_id)
    return _to_response(obj) if obj else None


async def update_teacher(
    db: AsyncSession,
    teacher_id: UUID,
    payload: TeacherUpdate,
) -> Optional[TeacherResponse]:
    obj = await _load_teacher(db, teacher_id)
    if not obj:
        return None
    if payload.email is not None:
        email = payload.email.lower()
        if email != obj.user.email:
            await validators.ensure_unique(db, User, {"email": email}, exclude_id=obj.user_id, entity="User")
        obj.user.email = email
    if payload.subject_ids is not None:
        obj.subjects = await validators.ensure_all_exist(db, Subject, payload.subject_ids, entity="Subject")
    if payload.name is not None:
        obj.user.name = payload.name
    if payload.specialization is not None:
        obj.specialization = payload.specialization
    if payload.bio is not None:
        obj.bio = payload.bio
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateKey("User", {"email": payload.email})
    logger.info("Updated teacher %s", teacher_id)
    return _to_response(await _load_teacher(db, teacher_id))


async def delete_teacher(
    db: AsyncSession,
    teacher_id: UUID,
) -> bool:
    """Delete the teacher, their schedule entries and their user account."""
    obj = await _load_teacher(db, teacher_id)
    if not obj:
        return False
    await db.execute(delete(ScheduleEntry).where(ScheduleEntry.teacher_id == teacher_id))
    user = obj.user
    await db.delete(obj)
    await db.delete(user)
    await db.commit()
    logger.info("Deleted teacher %s", teacher_id)
    return True


async def teacher_exists(db: AsyncSession, teacher_id: UUID) -> bool:
    result = await db.execute(select(Teacher.id).where(Teacher.id == teacher_id))
    return result.scalar_one_or_none() is not None
