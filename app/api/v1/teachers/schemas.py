from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class TeacherCreate(BaseModel):
    """Creates the user account (role PROFESSOR) and the teacher profile together."""

    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    specialization: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None
    subject_ids: Optional[List[UUID]] = None

    class Config:
        str_strip_whitespace = True


class TeacherUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    specialization: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None
    subject_ids: Optional[List[UUID]] = None

    class Config:
        str_strip_whitespace = True


class TeacherResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    email: EmailStr
    specialization: Optional[str] = None
    bio: Optional[str] = None
    subject_ids: List[UUID] = Field(default_factory=list)
    created_at: datetime

    class Config:
        from_attributes = True
