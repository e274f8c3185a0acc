"""
Schémas Pydantic pour les séances et la détection de conflits.
"""

from datetime import time
from typing import List, Literal, Optional

from pydantic import field_validator, model_validator

from app.schemas.common import CamelModel

ConflictType = Literal["teacher", "location", "both", "none"]


def _drop_offset(v: Optional[time]) -> Optional[time]:
    """Heure murale de la séance : un décalage éventuel (« 09:00Z ») est ignoré."""
    return v.replace(tzinfo=None) if v is not None else v


class LessonCreate(CamelModel):
    """Création d'une séance. La date est normalisée par le service."""
    class_id: int
    lesson_date: str
    start_time: time
    end_time: time
    location: str

    @field_validator("start_time", "end_time")
    @classmethod
    def naive_times(cls, v: Optional[time]) -> Optional[time]:
        return _drop_offset(v)

    @field_validator("location")
    @classmethod
    def location_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("La salle ou le lien ne peut pas être vide.")
        return v.strip()


class LessonUpdate(CamelModel):
    """Correction d'horaire ou de lieu (seule mutation autorisée d'une séance)."""
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def naive_times(cls, v: Optional[time]) -> Optional[time]:
        return _drop_offset(v)

    @field_validator("location")
    @classmethod
    def location_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("La salle ou le lien ne peut pas être vide.")
        return v.strip() if v else v

    @model_validator(mode="after")
    def at_least_one_field(self):
        if self.start_time is None and self.end_time is None and self.location is None:
            raise ValueError("Aucune correction fournie.")
        return self


class ScheduleResponse(CamelModel):
    schedule_id: int
    class_id: int
    lesson_date: str                # YYYY-MM-DD
    day_of_week: str
    start_time: time
    end_time: time
    location: str
    class_name: Optional[str] = None
    teacher_id: Optional[int] = None


class ScheduleListResponse(CamelModel):
    schedules: List[ScheduleResponse]


class TimeSlot(CamelModel):
    """Créneau : clé d'égalité exacte (jour de semaine, début, fin)."""
    day: str
    start_time: time
    end_time: time


class ConflictEntry(CamelModel):
    schedule_id: int
    class_id: int
    class_name: Optional[str] = None
    teacher_id: int
    location: str
    lesson_date: str


class ConflictGroup(CamelModel):
    slot: TimeSlot
    conflict_type: ConflictType
    entries: List[ConflictEntry]


class ConflictReport(CamelModel):
    conflict_groups: List[ConflictGroup]
