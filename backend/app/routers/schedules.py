"""
Router pour le planning : création et correction des séances,
vues hebdomadaires, résolution (classe, date) et rapport de conflits.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.database import get_db
from app.errors import ErrorKind, ServiceError
from app.principal import Principal, require_role
from app.responses import error_response
from app.schemas.schedule import (
    ConflictReport,
    LessonCreate,
    LessonUpdate,
    ScheduleListResponse,
    ScheduleResponse,
)
from app.services import conflict_service, schedule_service
from app.services.authorization_service import authorize_teacher_for_class
from app.services.retry import retry_on_unavailable

router = APIRouter(prefix="/api/v1/schedules", tags=["Planning"])

admin_only = require_role("admin")
teacher_or_admin = require_role("teacher", "admin")

_FORBIDDEN = ServiceError(ErrorKind.UNAUTHORIZED, "Accès non autorisé à cette classe.")


@router.post("", response_model=ScheduleResponse, status_code=201, summary="Créer une séance")
def create_lesson(
    data: LessonCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(admin_only),
):
    """
    Crée une séance datée pour une classe.
    400 si l'heure de début n'est pas strictement avant l'heure de fin.
    409 si ENFORCE_UNIQUE_LESSON_PER_DAY est actif et qu'une séance existe déjà ce jour-là.
    """
    result = schedule_service.create_lesson(db, data, enforce_unique=settings.ENFORCE_UNIQUE_LESSON_PER_DAY)
    if not result.ok:
        return error_response(result.error)
    return result.value


@router.get("", response_model=ScheduleListResponse, summary="Séances d'une période")
def list_schedules(
    date_from: str = Query(..., alias="from"),
    date_to: str = Query(..., alias="to"),
    class_id: Optional[int] = Query(None, alias="classId"),
    teacher_id: Optional[int] = Query(None, alias="teacherId"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(teacher_or_admin),
):
    """Séances triées par date puis heure de début. Un enseignant ne consulte que son planning."""
    if principal.role == "teacher":
        if teacher_id is not None and teacher_id != principal.id:
            return error_response(_FORBIDDEN)
        if class_id is not None and not authorize_teacher_for_class(db, principal.id, class_id):
            return error_response(_FORBIDDEN)

    result = retry_on_unavailable(
        lambda: schedule_service.find_lessons_in_range(
            db, date_from, date_to, class_id=class_id, teacher_id=teacher_id,
        ),
        attempts=settings.DB_RETRY_ATTEMPTS,
        base_delay=settings.DB_RETRY_BASE_DELAY,
    )
    if not result.ok:
        return error_response(result.error)
    return ScheduleListResponse(schedules=result.value)


@router.get("/lookup", response_model=ScheduleResponse, summary="Séance d'une classe à une date")
def find_lesson(
    class_id: int = Query(..., alias="classId"),
    date: str = Query(...),
    db: Session = Depends(get_db),
    principal: Principal = Depends(teacher_or_admin),
):
    """404 avec availableDates si aucune séance ne tombe ce jour-là."""
    if principal.role == "teacher" and not authorize_teacher_for_class(db, principal.id, class_id):
        return error_response(_FORBIDDEN)

    result = schedule_service.find_lesson(db, class_id, date)
    if not result.ok:
        return error_response(result.error)
    return result.value


@router.get("/conflicts", response_model=ConflictReport, summary="Conflits enseignant / salle")
def scan_conflicts(
    date_from: str = Query(..., alias="from"),
    date_to: str = Query(..., alias="to"),
    only_conflicts: bool = Query(False, alias="onlyConflicts"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(admin_only),
):
    """
    Regroupe les séances par créneau exact (jour, début, fin) et signale
    les enseignants ou salles partagés. Les créneaux qui se chevauchent
    sans être identiques ne sont pas comparés.
    """
    result = conflict_service.scan_conflicts(
        db, date_from, date_to,
        max_days=settings.CONFLICT_SCAN_MAX_DAYS,
        only_conflicts=only_conflicts,
    )
    if not result.ok:
        return error_response(result.error)
    return result.value


@router.patch("/{schedule_id}", response_model=ScheduleResponse, summary="Corriger une séance")
def update_lesson(
    schedule_id: int,
    data: LessonUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(admin_only),
):
    """Correction d'horaire ou de salle ; la date et la classe restent inchangées."""
    result = schedule_service.update_lesson(db, schedule_id, data)
    if not result.ok:
        return error_response(result.error)
    return result.value
