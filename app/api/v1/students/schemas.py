import re
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.core.enums import Gender, StudentStatus

# Angolan Bilhete de Identidade, e.g. 003456789LA042
BI_NUMBER_PATTERN = re.compile(r"^\d{6,9}[A-Z]{2}\d{3}$")


def normalize_bi_number(value: Optional[str]) -> Optional[str]:
    """Upper case, whitespace removed; empty becomes None."""
    if value is None:
        return None
    cleaned = re.sub(r"\s+", "", value).upper()
    return cleaned or None


def _validate_bi_number(value: Optional[str]) -> Optional[str]:
    value = normalize_bi_number(value)
    if value is not None and not BI_NUMBER_PATTERN.match(value):
        raise ValueError("Invalid BI number format (e.g. 003456789LA042)")
    return value


class StudentCreate(BaseModel):
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=100)
    gender: Gender
    birth_date: date
    bi_number: Optional[str] = Field(None, description="Bilhete de Identidade, e.g. 003456789LA042")
    province: Optional[str] = Field(None, max_length=100)
    municipality: Optional[str] = Field(None, max_length=100)
    guardian_name: Optional[str] = Field(None, max_length=255)
    guardian_phone: Optional[str] = Field(None, max_length=50)

    @field_validator("bi_number", mode="before")
    @classmethod
    def check_bi_number(cls, v: Optional[str]) -> Optional[str]:
        return _validate_bi_number(v)

    class Config:
        str_strip_whitespace = True


class StudentUpdate(BaseModel):
    """All fields optional. Class placement is managed through classes and enrollments."""

    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=100)
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    bi_number: Optional[str] = None
    province: Optional[str] = Field(None, max_length=100)
    municipality: Optional[str] = Field(None, max_length=100)
    guardian_name: Optional[str] = Field(None, max_length=255)
    guardian_phone: Optional[str] = Field(None, max_length=50)
    status: Optional[StudentStatus] = None

    @field_validator("bi_number", mode="before")
    @classmethod
    def check_bi_number(cls, v: Optional[str]) -> Optional[str]:
        return _validate_bi_number(v)

    class Config:
        str_strip_whitespace = True


class StudentResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    gender: Gender
    birth_date: date
    bi_number: Optional[str] = None
    student_number: str
    province: Optional[str] = None
    municipality: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    class_id: Optional[UUID] = None
    status: StudentStatus
    created_at: datetime

    class Config:
        from_attributes = True
