from typing import Any, List, Optional, Sequence
from uuid import UUID

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CapacityExceeded(ServiceError):
    """More students than the class has seats for."""

    def __init__(self, capacity: int, candidate_count: int, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"Number of students ({candidate_count}) exceeds class capacity ({capacity})",
            status.HTTP_400_BAD_REQUEST,
        )
        self.capacity = capacity
        self.candidate_count = candidate_count


class DuplicateKey(ServiceError):
    """Another record already holds the unique key."""

    def __init__(self, entity: str, key: dict, existing_id: Optional[Any] = None) -> None:
        rendered = ", ".join(f"{field}={value!r}" for field, value in key.items())
        super().__init__(f"{entity} already exists ({rendered})", status.HTTP_409_CONFLICT)
        self.entity = entity
        self.key = key
        self.existing_id = existing_id


class MissingReferences(ServiceError):
    """One or more referenced ids did not resolve."""

    def __init__(self, entity: str, missing_ids: Sequence[UUID]) -> None:
        missing: List[UUID] = list(missing_ids)
        super().__init__(
            f"{entity} not found: {', '.join(str(i) for i in missing)}",
            status.HTTP_400_BAD_REQUEST,
        )
        self.entity = entity
        self.missing_ids = missing


class ScheduleConflict(ServiceError):
    """The teacher already has an overlapping slot on that weekday."""

    def __init__(self, conflicting_ids: Sequence[UUID]) -> None:
        super().__init__(
            "Teacher already has a conflicting schedule entry in this period",
            status.HTTP_409_CONFLICT,
        )
        self.conflicting_ids = list(conflicting_ids)


class InvalidTimeRange(ServiceError):
    def __init__(self) -> None:
        super().__init__("end_time must be after start_time", status.HTTP_400_BAD_REQUEST)
