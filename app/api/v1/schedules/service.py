import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import validators
from app.core.enums import WEEKDAY_ORDER, Weekday
from app.core.models import ScheduleEntry, Subject, Teacher

from app.api.v1.teachers import service as teachers_service

from .schemas import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
)

logger = logging.getLogger(__name__)


def _to_response(s: ScheduleEntry) -> ScheduleResponse:
    return ScheduleResponse(
        id=s.id,
        teacher_id=s.teacher_id,
        subject_id=s.subject_id,
        weekday=s.weekday,
        start_time=s.start_time,
        end_time=s.end_time,
        created_at=s.created_at,
    )


def _week_order(stmt):
    return stmt.order_by(case(WEEKDAY_ORDER, value=ScheduleEntry.weekday), ScheduleEntry.start_time)


async def create_schedule(
    db: AsyncSession,
    payload: ScheduleCreate,
) -> ScheduleResponse:
    await validators.ensure_all_exist(db, Teacher, [payload.teacher_id], entity="Teacher")
    await validators.ensure_all_exist(db, Subject, [payload.subject_id], entity="Subject")
    await validators.ensure_no_schedule_conflict(
        db, payload.teacher_id, payload.weekday, payload.start_time, payload.end_time
    )
    obj = ScheduleEntry(
        teacher_id=payload.teacher_id,
        subject_id=payload.subject_id,
        weekday=payload.weekday.value,
        start_time=payload.start_time,
        end_time=payload.end_time,
    )
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info(
        "Created schedule entry %s for teacher %s on %s %s-%s",
        obj.id,
        obj.teacher_id,
        obj.weekday,
        payload.start_time.strftime("%H:%M"),
        payload.end_time.strftime("%H:%M"),
    )
    return _to_response(obj)


async def list_schedules(
    db: AsyncSession,
    teacher_id: Optional[UUID] = None,
    weekday: Optional[Weekday] = None,
    subject_id: Optional[UUID] = None,
) -> List[ScheduleResponse]:
    stmt = select(ScheduleEntry)
    if teacher_id is not None:
        stmt = stmt.where(ScheduleEntry.teacher_id == teacher_id)
    if weekday is not None:
        stmt = stmt.where(ScheduleEntry.weekday == weekday.value)
    if subject_id is not None:
        stmt = stmt.where(ScheduleEntry.subject_id == subject_id)
    result = await db.execute(_week_order(stmt))
    return [_to_response(s) for s in result.scalars().all()]


async def get_schedule(
    db: AsyncSession,
    schedule_id: UUID,
) -> Optional[ScheduleResponse]:
    obj = await db.get(ScheduleEntry, schedule_id)
    return _to_response(obj) if obj else None


async def update_schedule(
    db: AsyncSession,
    schedule_id: UUID,
    payload: ScheduleUpdate,
) -> Optional[ScheduleResponse]:
    obj = await db.get(ScheduleEntry, schedule_id)
    if not obj:
        return None
    if payload.teacher_id is not None and payload.teacher_id != obj.teacher_id:
        await validators.ensure_all_exist(db, Teacher, [payload.teacher_id], entity="Teacher")
    if payload.subject_id is not None and payload.subject_id != obj.subject_id:
        await validators.ensure_all_exist(db, Subject, [payload.subject_id], entity="Subject")

    teacher_id = payload.teacher_id or obj.teacher_id
    weekday = payload.weekday.value if payload.weekday is not None else obj.weekday
    start_time = payload.start_time or obj.start_time
    end_time = payload.end_time or obj.end_time
    validators.validate_time_range(start_time, end_time)

    slot_changed = (teacher_id, weekday, start_time, end_time) != (
        obj.teacher_id,
        obj.weekday,
        obj.start_time,
        obj.end_time,
    )
    if slot_changed:
        await validators.ensure_no_schedule_conflict(
            db, teacher_id, weekday, start_time, end_time, exclude_schedule_id=schedule_id
        )

    obj.teacher_id = teacher_id
    obj.weekday = weekday
    obj.start_time = start_time
    obj.end_time = end_time
    if payload.subject_id is not None:
        obj.subject_id = payload.subject_id
    await db.commit()
    await db.refresh(obj)
    logger.info("Updated schedule entry %s", schedule_id)
    return _to_response(obj)


async def delete_schedule(
    db: AsyncSession,
    schedule_id: UUID,
) -> bool:
    obj = await db.get(ScheduleEntry, schedule_id)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted schedule entry %s", schedule_id)
    return True


async def list_schedules_by_teacher(
    db: AsyncSession,
    teacher_id: UUID,
) -> Optional[List[ScheduleResponse]]:
    """None when the teacher does not exist."""
    if not await teachers_service.teacher_exists(db, teacher_id):
        return None
    return await list_schedules(db, teacher_id=teacher_id)


async def check_conflicts(
    db: AsyncSession,
    payload: ConflictCheckRequest,
) -> Optional[ConflictCheckResponse]:
    """Report overlapping entries without writing anything. None when the teacher does not exist."""
    if not await teachers_service.teacher_exists(db, payload.teacher_id):
        return None
    validators.validate_time_range(payload.start_time, payload.end_time)
    conflicts = await validators.find_schedule_conflicts(
        db, payload.teacher_id, payload.weekday, payload.start_time, payload.end_time
    )
    return ConflictCheckResponse(
        has_conflicts=bool(conflicts),
        conflicts=[_to_response(c) for c in conflicts],
    )
