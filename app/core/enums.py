from enum import Enum


class Shift(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"


class Weekday(str, Enum):
    """School week days as used on Angolan timetables (Monday to Saturday)."""

    SEGUNDA = "SEGUNDA"
    TERCA = "TERCA"
    QUARTA = "QUARTA"
    QUINTA = "QUINTA"
    SEXTA = "SEXTA"
    SABADO = "SABADO"


WEEKDAY_ORDER = {day.value: index for index, day in enumerate(Weekday)}


class EnrollmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    TRANSFERRED = "TRANSFERRED"
    CANCELLED = "CANCELLED"


class StudentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    GRADUATED = "GRADUATED"


class Gender(str, Enum):
    MASCULINO = "MASCULINO"
    FEMININO = "FEMININO"


class SubjectCategory(str, Enum):
    OBRIGATORIA = "OBRIGATORIA"
    OPCIONAL = "OPCIONAL"
    TECNICA = "TECNICA"


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    DIRETOR = "DIRETOR"
    SECRETARIA = "SECRETARIA"
    PROFESSOR = "PROFESSOR"
