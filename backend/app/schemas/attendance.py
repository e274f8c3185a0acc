"""
Schémas Pydantic pour les présences.

Le statut reste un `str` à l'entrée : une valeur hors énumération doit
produire InvalidStatus au niveau du service (et annuler toute la sauvegarde),
pas une erreur 422 de validation du corps.
"""

from datetime import time
from typing import List, Optional

from pydantic import field_validator, model_validator

from app.schemas.common import CamelModel

MAX_BATCH_SIZE = 500


class AttendanceRecordIn(CamelModel):
    student_id: int
    status: str
    note: Optional[str] = None


class AttendanceSaveRequest(CamelModel):
    """Corps de POST saveAttendance : instantané complet de la séance."""
    class_id: int
    teacher_id: int
    date: str
    attendance: List[AttendanceRecordIn]

    @field_validator("attendance")
    @classmethod
    def batch_not_too_large(cls, v: List[AttendanceRecordIn]) -> List[AttendanceRecordIn]:
        if len(v) > MAX_BATCH_SIZE:
            raise ValueError(f"Lot trop grand : maximum {MAX_BATCH_SIZE} élèves par séance.")
        return v


class StudentStatusUpdate(CamelModel):
    status: str
    note: Optional[str] = None


class AttendanceRecord(CamelModel):
    student_id: int
    status: str
    note: Optional[str] = None


class AttendanceStatistics(CamelModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0

    @model_validator(mode="after")
    def total_is_sum(self):
        if self.total != self.present + self.absent + self.late + self.excused:
            raise ValueError("total doit être égal à present + absent + late + excused.")
        return self


class AttendanceSaveResult(CamelModel):
    success: bool = True
    schedule_id: int
    lesson_date: str
    records: List[AttendanceRecord]
    statistics: AttendanceStatistics


class AttendanceListResponse(CamelModel):
    records: List[AttendanceRecord]


class AttendanceSheetEntry(CamelModel):
    """Élève inscrit et son statut pour la séance (None = pas encore saisi)."""
    student_id: int
    full_name: Optional[str] = None
    status: Optional[str] = None
    note: Optional[str] = None


class AttendanceSheet(CamelModel):
    schedule_id: int
    lesson_date: str
    entries: List[AttendanceSheetEntry]
    statistics: AttendanceStatistics


class LessonStatistics(CamelModel):
    schedule_id: int
    lesson_date: str
    start_time: time
    statistics: AttendanceStatistics


class ClassAttendanceReport(CamelModel):
    class_id: int
    lessons: List[LessonStatistics]
    totals: AttendanceStatistics


class StudentAttendanceEntry(CamelModel):
    schedule_id: int
    lesson_date: str
    status: str
    note: Optional[str] = None


class StudentAttendanceResponse(CamelModel):
    records: List[StudentAttendanceEntry]
