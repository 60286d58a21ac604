"""Teacher profile linked to a user account. Teaches subjects and owns weekly schedule entries."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Table, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


teacher_subjects = Table(
    "teacher_subjects",
    Base.metadata,
    Column("teacher_id", Uuid, ForeignKey("teachers.id", ondelete="CASCADE"), primary_key=True),
    Column("subject_id", Uuid, ForeignKey("subjects.id", ondelete="CASCADE"), primary_key=True),
)


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    specialization = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="teacher")
    subjects = relationship("Subject", secondary=teacher_subjects, back_populates="teachers")
    classes = relationship("SchoolClass", secondary="class_teachers", back_populates="teachers")
