from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.api.v1.students.schemas import StudentCreate, StudentResponse
from app.core.enums import EnrollmentStatus


class EnrollmentCreate(BaseModel):
    student_id: UUID
    class_id: UUID
    year: int = Field(..., ge=2020, description="Academic year")
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE


class EnrollmentUpdate(BaseModel):
    status: Optional[EnrollmentStatus] = None
    class_id: Optional[UUID] = Field(None, description="Move the enrollment to another class")


class EnrollmentResponse(BaseModel):
    id: UUID
    student_id: UUID
    class_id: UUID
    year: int
    status: EnrollmentStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EnrollmentWithStudentCreate(BaseModel):
    """Enroll by personal data. A student with the same BI number is reused, otherwise one is registered."""

    student: StudentCreate
    class_id: UUID
    year: int = Field(..., ge=2020, description="Academic year")
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE


class EnrollmentWithStudentResponse(BaseModel):
    enrollment: EnrollmentResponse
    student: StudentResponse
    student_created: bool
