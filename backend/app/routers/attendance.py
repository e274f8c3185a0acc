"""
Router pour la saisie et la consultation des présences (enseignants).
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.database import get_db
from app.errors import ErrorKind, ServiceError
from app.principal import Principal, require_role
from app.responses import error_response
from app.schemas.attendance import (
    AttendanceListResponse,
    AttendanceRecord,
    AttendanceSaveRequest,
    AttendanceSaveResult,
    AttendanceSheet,
    AttendanceStatistics,
    ClassAttendanceReport,
    StudentStatusUpdate,
)
from app.services import attendance_service
from app.services.retry import retry_on_unavailable

router = APIRouter(prefix="/api/v1/attendance", tags=["Présences"])

teacher_only = require_role("teacher")
teacher_or_admin = require_role("teacher", "admin")


def _teacher_scope(principal: Principal):
    """Un enseignant ne voit que ses classes ; un admin voit tout."""
    return principal.id if principal.role == "teacher" else None


@router.post("", response_model=AttendanceSaveResult, summary="Enregistrer les présences d'une séance")
def save_attendance(
    data: AttendanceSaveRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(teacher_only),
):
    """
    Remplace toutes les présences de la séance (classId, date) par la liste envoyée.

    Tout ou rien : 403 si l'enseignant n'est pas titulaire de la classe,
    404 si aucune séance à cette date (availableDates liste les dates existantes),
    400 si un statut est hors {present, absent, late, excused}.
    """
    if data.teacher_id != principal.id:
        return error_response(ServiceError(ErrorKind.UNAUTHORIZED, "Accès non autorisé à cette classe."))

    result = attendance_service.save_attendance(db, data.class_id, data.teacher_id, data.date, data.attendance)
    if not result.ok:
        return error_response(result.error)
    return result.value


@router.get("", response_model=AttendanceListResponse, summary="Présences d'une séance")
def get_attendance(
    class_id: int = Query(..., alias="classId"),
    date: str = Query(...),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(teacher_or_admin),
):
    """Même résolution (classe, date) que l'enregistrement."""
    result = retry_on_unavailable(
        lambda: attendance_service.get_attendance(db, class_id, date, teacher_id=_teacher_scope(principal)),
        attempts=settings.DB_RETRY_ATTEMPTS,
        base_delay=settings.DB_RETRY_BASE_DELAY,
    )
    if not result.ok:
        return error_response(result.error)
    return AttendanceListResponse(records=result.value)


@router.get("/sheet", response_model=AttendanceSheet, summary="Feuille d'appel d'une séance")
def get_attendance_sheet(
    class_id: int = Query(..., alias="classId"),
    date: str = Query(...),
    db: Session = Depends(get_db),
    principal: Principal = Depends(teacher_only),
):
    """Élèves inscrits avec leur statut enregistré (null si pas encore saisi)."""
    result = attendance_service.get_attendance_sheet(db, class_id, principal.id, date)
    if not result.ok:
        return error_response(result.error)
    return result.value


@router.patch(
    "/{schedule_id}/students/{student_id}",
    response_model=AttendanceRecord,
    summary="Modifier le statut d'un élève",
)
def update_student_status(
    schedule_id: int,
    student_id: int,
    data: StudentStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(teacher_only),
):
    """Correction ponctuelle d'une seule ligne, sans toucher aux autres élèves."""
    result = attendance_service.update_student_status(
        db, schedule_id, student_id, data, teacher_id=principal.id,
    )
    if not result.ok:
        return error_response(result.error)
    return result.value


@router.get("/statistics/{schedule_id}", response_model=AttendanceStatistics, summary="Statistiques d'une séance")
def get_statistics(
    schedule_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(teacher_or_admin),
):
    result = attendance_service.get_statistics(db, schedule_id, teacher_id=_teacher_scope(principal))
    if not result.ok:
        return error_response(result.error)
    return result.value


@router.get("/report/{class_id}", response_model=ClassAttendanceReport, summary="Bilan de présence d'une classe")
def get_class_report(
    class_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(teacher_only),
):
    """Statistiques de chaque séance de la classe et totaux."""
    result = attendance_service.get_class_report(db, class_id, principal.id)
    if not result.ok:
        return error_response(result.error)
    return result.value
