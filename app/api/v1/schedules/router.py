from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import Weekday
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
)
from . import service

router = APIRouter(prefix="/api/v1/schedules", tags=["schedules"])


@router.post(
    "",
    response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_schedule(
    payload: ScheduleCreate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.create_schedule(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/check-conflicts",
    response_model=ConflictCheckResponse,
)
async def check_conflicts(
    payload: ConflictCheckRequest,
    db: AsyncSession = Depends(get_db),
):
    try:
        result = await service.check_conflicts(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return result


@router.get(
    "",
    response_model=List[ScheduleResponse],
)
async def list_schedules(
    teacher_id: Optional[UUID] = Query(None),
    weekday: Optional[Weekday] = Query(None),
    subject_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_schedules(db, teacher_id=teacher_id, weekday=weekday, subject_id=subject_id)


@router.get(
    "/teacher/{teacher_id}",
    response_model=List[ScheduleResponse],
)
async def list_schedules_by_teacher(
    teacher_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    result = await service.list_schedules_by_teacher(db, teacher_id)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return result


@router.get(
    "/{schedule_id}",
    response_model=ScheduleResponse,
)
async def get_schedule(
    schedule_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    obj = await service.get_schedule(db, schedule_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule entry not found")
    return obj


@router.put(
    "/{schedule_id}",
    response_model=ScheduleResponse,
)
async def update_schedule(
    schedule_id: UUID,
    payload: ScheduleUpdate,
    db: AsyncSession = Depends(get_db),
):
    try:
        obj = await service.update_schedule(db, schedule_id, payload)
        if not obj:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule entry not found")
        return obj
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{schedule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_schedule(
    schedule_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    deleted = await service.delete_schedule(db, schedule_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule entry not found")
