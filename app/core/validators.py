"""Business-rule checks run inline by create/update handlers.

Every check is stateless: it looks only at its arguments and, where it needs
stored data, at one read through the session it is given. A failed check
raises a ServiceError subclass; nothing is retried and nothing is written.
The database unique constraints remain the authoritative guarantee for
uniqueness, these checks only reject early.
"""

import logging
from datetime import time
from typing import Any, Dict, Iterable, List, Optional, Type, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import Weekday
from app.core.exceptions import (
    CapacityExceeded,
    DuplicateKey,
    InvalidTimeRange,
    MissingReferences,
    ScheduleConflict,
)
from app.core.models import ScheduleEntry

logger = logging.getLogger(__name__)


def validate_capacity(capacity: int, candidate_count: int) -> None:
    """Reject when candidate_count seats are asked of a class with capacity seats."""
    if candidate_count > capacity:
        logger.warning("Capacity exceeded: %s students for %s seats", candidate_count, capacity)
        raise CapacityExceeded(capacity, candidate_count)


async def ensure_unique(
    db: AsyncSession,
    model: Type[Any],
    key: Dict[str, Any],
    exclude_id: Optional[UUID] = None,
    entity: Optional[str] = None,
) -> None:
    """
    Reject when another row of model already holds key (column -> value).

    exclude_id skips the row being updated so it can keep its own key.
    """
    stmt = select(model).where(*[getattr(model, column) == value for column, value in key.items()])
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    existing = result.scalars().first()
    if existing is not None:
        logger.warning("Duplicate %s for key %s (existing id=%s)", model.__name__, key, existing.id)
        raise DuplicateKey(entity or model.__name__, key, existing.id)


async def ensure_all_exist(
    db: AsyncSession,
    model: Type[Any],
    ids: Iterable[UUID],
    entity: Optional[str] = None,
) -> List[Any]:
    """
    Resolve ids against model in one query and return the rows.

    Repeated ids are collapsed first, so only truly unknown ids cause a
    mismatch. The error names the ids that did not resolve.
    """
    requested = list(dict.fromkeys(ids))
    if not requested:
        return []
    result = await db.execute(select(model).where(model.id.in_(requested)))
    rows = list(result.scalars().all())
    if len(rows) != len(requested):
        found = {row.id for row in rows}
        missing = [i for i in requested if i not in found]
        logger.warning("Unresolved %s ids: %s", model.__name__, missing)
        raise MissingReferences(entity or model.__name__, missing)
    return rows


def validate_time_range(start: time, end: time) -> None:
    # zero-length and inverted intervals are never valid slots
    if end <= start:
        raise InvalidTimeRange()


def intervals_overlap(start1: time, end1: time, start2: time, end2: time) -> bool:
    """Half-open [start, end) overlap: touching intervals do not overlap."""
    return start1 < end2 and start2 < end1


async def find_schedule_conflicts(
    db: AsyncSession,
    teacher_id: UUID,
    weekday: Union[Weekday, str],
    start: time,
    end: time,
    exclude_schedule_id: Optional[UUID] = None,
) -> List[ScheduleEntry]:
    """Entries of teacher_id on weekday that overlap [start, end)."""
    stmt = select(ScheduleEntry).where(
        ScheduleEntry.teacher_id == teacher_id,
        ScheduleEntry.weekday == Weekday(weekday).value,
    )
    if exclude_schedule_id is not None:
        stmt = stmt.where(ScheduleEntry.id != exclude_schedule_id)
    result = await db.execute(stmt.order_by(ScheduleEntry.start_time))
    return [
        entry
        for entry in result.scalars().all()
        if intervals_overlap(start, end, entry.start_time, entry.end_time)
    ]


async def ensure_no_schedule_conflict(
    db: AsyncSession,
    teacher_id: UUID,
    weekday: Union[Weekday, str],
    start: time,
    end: time,
    exclude_schedule_id: Optional[UUID] = None,
) -> None:
    validate_time_range(start, end)
    conflicts = await find_schedule_conflicts(db, teacher_id, weekday, start, end, exclude_schedule_id)
    if conflicts:
        logger.warning(
            "Schedule conflict for teacher %s on %s %s-%s: %s",
            teacher_id,
            Weekday(weekday).value,
            start.strftime("%H:%M"),
            end.strftime("%H:%M"),
            [c.id for c in conflicts],
        )
        raise ScheduleConflict([c.id for c in conflicts])
