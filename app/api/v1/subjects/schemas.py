from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.enums import SubjectCategory


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50, description="e.g. MAT10; stored upper case")
    description: Optional[str] = None
    category: SubjectCategory = SubjectCategory.OBRIGATORIA
    workload_hours: Optional[int] = Field(None, ge=0, description="Weekly hours")
    credits: Optional[int] = Field(None, ge=0)
    teacher_ids: Optional[List[UUID]] = None

    class Config:
        str_strip_whitespace = True


class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    category: Optional[SubjectCategory] = None
    workload_hours: Optional[int] = Field(None, ge=0)
    credits: Optional[int] = Field(None, ge=0)
    teacher_ids: Optional[List[UUID]] = None

    class Config:
        str_strip_whitespace = True


class SubjectResponse(BaseModel):
    id: UUID
    name: str
    code: str
    description: Optional[str] = None
    category: SubjectCategory
    workload_hours: Optional[int] = None
    credits: Optional[int] = None
    teacher_ids: List[UUID] = Field(default_factory=list)
    created_at: datetime

    class Config:
        from_attributes = True
