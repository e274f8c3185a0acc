"""
Router pour la consultation élève : séances et présences d'une classe,
réservées aux élèves inscrits.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import ErrorKind, ServiceError
from app.principal import Principal, require_role
from app.responses import error_response
from app.schemas.attendance import StudentAttendanceResponse
from app.schemas.schedule import ScheduleListResponse
from app.services import attendance_service, schedule_service

router = APIRouter(prefix="/api/v1/students", tags=["Élèves"])

student_or_admin = require_role("student", "admin")


def _is_self_or_admin(principal: Principal, student_id: int) -> bool:
    return principal.role == "admin" or principal.id == student_id


@router.get(
    "/{student_id}/classes/{class_id}/schedules",
    response_model=ScheduleListResponse,
    summary="Séances d'une classe de l'élève",
)
def get_student_schedules(
    student_id: int,
    class_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(student_or_admin),
):
    if not _is_self_or_admin(principal, student_id):
        return error_response(ServiceError(ErrorKind.UNAUTHORIZED, "Accès refusé."))

    result = schedule_service.get_student_schedules(db, class_id, student_id)
    if not result.ok:
        return error_response(result.error)
    return ScheduleListResponse(schedules=result.value)


@router.get(
    "/{student_id}/classes/{class_id}/attendance",
    response_model=StudentAttendanceResponse,
    summary="Historique de présence de l'élève",
)
def get_student_attendance(
    student_id: int,
    class_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(student_or_admin),
):
    if not _is_self_or_admin(principal, student_id):
        return error_response(ServiceError(ErrorKind.UNAUTHORIZED, "Accès refusé."))

    result = attendance_service.get_student_attendance(db, class_id, student_id)
    if not result.ok:
        return error_response(result.error)
    return StudentAttendanceResponse(records=result.value)
