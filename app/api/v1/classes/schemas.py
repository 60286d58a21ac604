from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.enums import Shift


class ClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, description="e.g. 10A")
    year: int = Field(..., ge=2020, description="Academic year, e.g. 2025")
    shift: Shift
    capacity: int = Field(..., ge=1, description="Maximum number of active students")
    student_ids: Optional[List[UUID]] = Field(None, description="Students to place in the class")
    teacher_ids: Optional[List[UUID]] = Field(None, description="Teachers responsible for the class")

    class Config:
        str_strip_whitespace = True


class ClassUpdate(BaseModel):
    """All fields optional. student_ids / teacher_ids replace the current lists when given."""

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    year: Optional[int] = Field(None, ge=2020)
    shift: Optional[Shift] = None
    capacity: Optional[int] = Field(None, ge=1)
    student_ids: Optional[List[UUID]] = None
    teacher_ids: Optional[List[UUID]] = None

    class Config:
        str_strip_whitespace = True


class ClassResponse(BaseModel):
    id: UUID
    name: str
    year: int
    shift: Shift
    capacity: int
    student_ids: List[UUID] = Field(default_factory=list)
    teacher_ids: List[UUID] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ClassAvailabilityResponse(BaseModel):
    capacity: int
    enrolled: int = Field(..., description="Active enrollments in the class")
    available: int
    is_full: bool
