from datetime import datetime, time
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, field_serializer, field_validator

from app.core.enums import Weekday


def _parse_time_24(v: Union[str, time]) -> time:
    """Parse 24-hour time string (HH:MM or HH:MM:SS) to time."""
    if isinstance(v, time):
        return v
    if isinstance(v, str):
        v = v.strip()
        if len(v) <= 5:  # H:MM or HH:MM
            return datetime.strptime(v, "%H:%M").time()
        return datetime.strptime(v, "%H:%M:%S").time()
    raise ValueError("start_time/end_time must be 24-hour string (e.g. 08:00, 09:30) or time")


class ScheduleCreate(BaseModel):
    teacher_id: UUID
    subject_id: UUID
    weekday: Weekday
    start_time: Union[str, time] = Field(..., description="24-hour format, e.g. 08:00")
    end_time: Union[str, time] = Field(..., description="24-hour format, e.g. 09:30")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_time(cls, v: Union[str, time]) -> time:
        return _parse_time_24(v)


class ScheduleUpdate(BaseModel):
    teacher_id: Optional[UUID] = None
    subject_id: Optional[UUID] = None
    weekday: Optional[Weekday] = None
    start_time: Optional[Union[str, time]] = Field(None, description="24-hour format, e.g. 08:00")
    end_time: Optional[Union[str, time]] = Field(None, description="24-hour format, e.g. 09:30")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_time(cls, v: Optional[Union[str, time]]) -> Optional[time]:
        if v is None:
            return None
        return _parse_time_24(v)


class ConflictCheckRequest(BaseModel):
    teacher_id: UUID
    weekday: Weekday
    start_time: Union[str, time]
    end_time: Union[str, time]

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_time(cls, v: Union[str, time]) -> time:
        return _parse_time_24(v)


class ScheduleResponse(BaseModel):
    id: UUID
    teacher_id: UUID
    subject_id: UUID
    weekday: Weekday
    start_time: time
    end_time: time
    created_at: datetime

    class Config:
        from_attributes = True

    @field_serializer("start_time", "end_time")
    def serialize_time_24(self, t: time) -> str:
        """Output as 24-hour string HH:MM (e.g. 08:00, 09:30)."""
        return t.strftime("%H:%M")


class ConflictCheckResponse(BaseModel):
    has_conflicts: bool
    conflicts: List[ScheduleResponse] = Field(default_factory=list)
