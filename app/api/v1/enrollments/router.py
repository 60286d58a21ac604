from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentUpdate,
    EnrollmentWithStudentCreate,
    EnrollmentWithStudentResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/enrollments", tags=["enrollments"])


@router.post(
    "",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_enrollment(
    payload: EnrollmentCreate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.create_enrollment(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/with-student",
    response_model=EnrollmentWithStudentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_enrollment_with_student(
    payload: EnrollmentWithStudentCreate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.create_enrollment_with_student(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=List[EnrollmentResponse],
)
async def list_enrollments(
    year: Optional[int] = Query(None),
    class_id: Optional[UUID] = Query(None),
    student_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_enrollments(db, year=year, class_id=class_id, student_id=student_id)


@router.get(
    "/years",
    response_model=List[str],
)
async def list_enrollment_years(
    db: AsyncSession = Depends(get_db),
):
    return await service.list_years(db)


@router.get(
    "/{enrollment_id}",
    response_model=EnrollmentResponse,
)
async def get_enrollment(
    enrollment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    obj = await service.get_enrollment(db, enrollment_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Enrollment not found")
    return obj


@router.put(
    "/{enrollment_id}",
    response_model=EnrollmentResponse,
)
async def update_enrollment(
    enrollment_id: UUID,
    payload: EnrollmentUpdate,
    db: AsyncSession = Depends(get_db),
):
    try:
        obj = await service.update_enrollment(db, enrollment_id, payload)
        if not obj:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Enrollment not found")
        return obj
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{enrollment_id}",
    response_model=EnrollmentResponse,
)
async def cancel_enrollment(
    enrollment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    obj = await service.cancel_enrollment(db, enrollment_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Enrollment not found")
    return obj
