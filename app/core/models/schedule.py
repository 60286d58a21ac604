"""Weekly schedule entry of a teacher. No two entries of a teacher on the same weekday may overlap."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Time, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class ScheduleEntry(Base):
    __tablename__ = "schedules"
    __table_args__ = (
        Index("ix_schedules_teacher_weekday", "teacher_id", "weekday"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    teacher_id = Column(Uuid, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Uuid, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    weekday = Column(String(10), nullable=False)  # SEGUNDA .. SABADO
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    teacher = relationship("Teacher")
    subject = relationship("Subject")
