"""Students. class_id is the class the student currently sits in (null when unassigned)."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(100), nullable=False)
    gender = Column(String(20), nullable=False)
    birth_date = Column(Date, nullable=False)
    # Bilhete de Identidade, stored upper case without whitespace
    bi_number = Column(String(20), nullable=True, unique=True)
    student_number = Column(String(20), nullable=False, unique=True)
    province = Column(String(100), nullable=True)
    municipality = Column(String(100), nullable=True)
    guardian_name = Column(String(255), nullable=True)
    guardian_phone = Column(String(50), nullable=True)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(20), nullable=False, default="ACTIVE")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    school_class = relationship("SchoolClass", back_populates="students")
