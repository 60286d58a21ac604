from app.core.models.user import User
from app.core.models.teacher import Teacher, teacher_subjects
from app.core.models.subject import Subject
from app.core.models.class_model import SchoolClass, class_teachers
from app.core.models.student import Student
from app.core.models.enrollment import Enrollment
from app.core.models.schedule import ScheduleEntry

__all__ = [
    "Enrollment",
    "ScheduleEntry",
    "SchoolClass",
    "Student",
    "Subject",
    "Teacher",
    "User",
    "class_teachers",
    "teacher_subjects",
]
