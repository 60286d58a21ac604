"""Subjects (disciplinas), e.g. Matemática, Língua Portuguesa. Name and code are globally unique."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.core.models.teacher import teacher_subjects


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    code = Column(String(50), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    # OBRIGATORIA | OPCIONAL | TECNICA
    category = Column(String(20), nullable=False, default="OBRIGATORIA")
    workload_hours = Column(Integer, nullable=True)  # weekly hours
    credits = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    teachers = relationship("Teacher", secondary=teacher_subjects, back_populates="subjects")
