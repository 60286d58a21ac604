"""Classes (turmas), e.g. "10A" for academic year 2025. Model named SchoolClass to avoid Python 'class' keyword."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class_teachers = Table(
    "class_teachers",
    Base.metadata,
    Column("class_id", Uuid, ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True),
    Column("teacher_id", Uuid, ForeignKey("teachers.id", ondelete="CASCADE"), primary_key=True),
)


class SchoolClass(Base):
    """A class for one academic year. capacity bounds ACTIVE enrollments, checked on write only."""

    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("name", "year", name="uq_class_name_year"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(50), nullable=False)
    year = Column(Integer, nullable=False)
    # MORNING | AFTERNOON | EVENING
    shift = Column(String(20), nullable=False)
    capacity = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    students = relationship("Student", back_populates="school_class")
    teachers = relationship("Teacher", secondary=class_teachers, back_populates="classes")
