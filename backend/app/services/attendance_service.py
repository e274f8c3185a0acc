"""
Service métier pour les présences par séance.

Enregistrement en « remplacement complet » : la liste envoyée par l'enseignant
est l'instantané de toute la séance. Dans une seule transaction, on supprime
les présences existantes de la séance puis on insère la nouvelle liste.
Tout ou rien : au moindre échec, rollback et aucune ligne modifiée.
"""

import logging
from collections import Counter
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ErrorKind, Result
from app.models.attendance import ATTENDANCE_STATUSES, Attendance
from app.models.schedule import Schedule
from app.schemas.attendance import (
    AttendanceRecord,
    AttendanceRecordIn,
    AttendanceSaveResult,
    AttendanceSheet,
    AttendanceSheetEntry,
    AttendanceStatistics,
    ClassAttendanceReport,
    LessonStatistics,
    StudentAttendanceEntry,
    StudentStatusUpdate,
)
from app.services.authorization_service import authorize_student_for_class, authorize_teacher_for_class
from app.services.calendar_date import CalendarDateInput, normalize_calendar_date
from app.services.datastore import datastore_guard
from app.services.roster_service import RosterProvider, SqlRosterProvider, student_names
from app.services.schedule_service import resolve_lesson

logger = logging.getLogger(__name__)

_UNAUTHORIZED_MESSAGE = "Accès non autorisé à cette classe."


@datastore_guard
def save_attendance(
    db: Session,
    class_id: int,
    teacher_id: int,
    lesson_date: CalendarDateInput,
    records: List[AttendanceRecordIn],
) -> Result[AttendanceSaveResult]:
    """
    Enregistre les présences d'une séance (remplacement complet).

    Étapes, dans une seule transaction :
    1. l'enseignant doit être titulaire de la classe → sinon Unauthorized
    2. résolution (classe, date) → séance, sinon LessonNotFound + dates disponibles
    3. contrôle des statuts → InvalidStatus, rien n'est écrit
    4. verrou sur la séance, DELETE de ses présences puis INSERT de la liste reçue
    5. commit, ou rollback complet en cas d'échec
    """
    if not class_id or not teacher_id or not lesson_date:
        return Result.fail(ErrorKind.VALIDATION_ERROR, "classId, teacherId et date sont obligatoires.")

    if not authorize_teacher_for_class(db, teacher_id, class_id):
        db.rollback()
        logger.warning("Enregistrement refusé : enseignant %s non titulaire de la classe %s", teacher_id, class_id)
        return Result.fail(ErrorKind.UNAUTHORIZED, _UNAUTHORIZED_MESSAGE)

    lesson = resolve_lesson(db, class_id, lesson_date)
    if not lesson.ok:
        db.rollback()
        return Result.from_error(lesson.error)
    schedule = lesson.value
    schedule_id = schedule.schedule_id

    invalid = sorted({r.status for r in records if r.status not in ATTENDANCE_STATUSES})
    if invalid:
        db.rollback()
        return Result.fail(
            ErrorKind.INVALID_STATUS,
            f"Statut(s) invalide(s) : {', '.join(invalid)}. Valeurs acceptées : {', '.join(ATTENDANCE_STATUSES)}.",
        )

    student_counts = Counter(r.student_id for r in records)
    duplicated = sorted(sid for sid, count in student_counts.items() if count > 1)
    if duplicated:
        db.rollback()
        return Result.fail(
            ErrorKind.VALIDATION_ERROR,
            f"Élève(s) présent(s) plusieurs fois dans la liste : {', '.join(map(str, duplicated))}.",
        )

    try:
        _lock_schedule(db, schedule_id)
        db.execute(
            delete(Attendance).where(Attendance.schedule_id == schedule_id)
        )
        rows = [
            Attendance(
                schedule_id=schedule_id,
                student_id=r.student_id,
                status=r.status,
                note=r.note or None,
            )
            for r in records
        ]
        db.add_all(rows)
        db.flush()
        saved = [AttendanceRecord(student_id=r.student_id, status=r.status, note=r.note) for r in rows]
        saved_date = normalize_calendar_date(schedule.lesson_date).iso
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Présences rejetées pour la séance %s : %s", schedule_id, e.orig)
        return Result.fail(ErrorKind.VALIDATION_ERROR, "Élève inconnu ou doublon dans la liste de présences.")

    statistics = compute_statistics(r.status for r in saved)
    logger.info(
        "Présences enregistrées : séance %s (classe %s, %s) : %d présents, %d absents, %d retards, %d excusés",
        schedule_id, class_id, saved_date,
        statistics.present, statistics.absent, statistics.late, statistics.excused,
    )
    return Result.success(AttendanceSaveResult(
        schedule_id=schedule_id,
        lesson_date=saved_date,
        records=saved,
        statistics=statistics,
    ))


@datastore_guard
def get_attendance(
    db: Session,
    class_id: int,
    lesson_date: CalendarDateInput,
    teacher_id: Optional[int] = None,
) -> Result[List[AttendanceRecord]]:
    """
    Présences d'une séance, résolue exactement comme à l'enregistrement.
    Si `teacher_id` est fourni, il doit être titulaire de la classe.
    """
    if teacher_id is not None and not authorize_teacher_for_class(db, teacher_id, class_id):
        return Result.fail(ErrorKind.UNAUTHORIZED, _UNAUTHORIZED_MESSAGE)

    lesson = resolve_lesson(db, class_id, lesson_date)
    if not lesson.ok:
        return Result.from_error(lesson.error)

    rows = db.execute(
        select(Attendance)
        .where(Attendance.schedule_id == lesson.value.schedule_id)
        .order_by(Attendance.student_id)
    ).scalars().all()
    return Result.success([AttendanceRecord.model_validate(row) for row in rows])


@datastore_guard
def get_statistics(
    db: Session,
    schedule_id: int,
    teacher_id: Optional[int] = None,
) -> Result[AttendanceStatistics]:
    """Comptage par statut pour une séance. total == present + absent + late + excused."""
    schedule = db.get(Schedule, schedule_id)
    if schedule is None:
        return Result.fail(ErrorKind.LESSON_NOT_FOUND, f"Séance {schedule_id} introuvable.")
    if teacher_id is not None and not authorize_teacher_for_class(db, teacher_id, schedule.class_id):
        return Result.fail(ErrorKind.UNAUTHORIZED, _UNAUTHORIZED_MESSAGE)

    return Result.success(_statistics_by_schedule(db, [schedule_id]).get(schedule_id, AttendanceStatistics()))


@datastore_guard
def update_student_status(
    db: Session,
    schedule_id: int,
    student_id: int,
    data: StudentStatusUpdate,
    teacher_id: Optional[int] = None,
) -> Result[AttendanceRecord]:
    """
    Modifie le statut d'un seul élève sans toucher aux autres lignes de la séance.
    Crée la ligne si elle n'existe pas encore ; l'unicité (séance, élève) est préservée.
    La note existante n'est remplacée que si le client en envoie une.
    """
    status = data.status
    if status not in ATTENDANCE_STATUSES:
        return Result.fail(
            ErrorKind.INVALID_STATUS,
            f"Statut invalide : {status}. Valeurs acceptées : {', '.join(ATTENDANCE_STATUSES)}.",
        )

    schedule = db.get(Schedule, schedule_id)
    if schedule is None:
        return Result.fail(ErrorKind.LESSON_NOT_FOUND, f"Séance {schedule_id} introuvable.")
    if teacher_id is not None and not authorize_teacher_for_class(db, teacher_id, schedule.class_id):
        db.rollback()
        return Result.fail(ErrorKind.UNAUTHORIZED, _UNAUTHORIZED_MESSAGE)

    row = db.execute(
        select(Attendance).where(
            Attendance.schedule_id == schedule_id,
            Attendance.student_id == student_id,
        )
    ).scalar()

    try:
        if row is None:
            row = Attendance(schedule_id=schedule_id, student_id=student_id, status=status, note=data.note)
            db.add(row)
        else:
            # updated_at est rafraîchi par onupdate=func.now() côté base
            for field, value in data.model_dump(exclude_unset=True).items():
                setattr(row, field, value)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Mise à jour rejetée (séance %s, élève %s) : %s", schedule_id, student_id, e.orig)
        return Result.fail(ErrorKind.VALIDATION_ERROR, f"Élève {student_id} inconnu.")

    db.refresh(row)
    logger.info("Présence mise à jour : séance %s, élève %s → %s", schedule_id, student_id, status)
    return Result.success(AttendanceRecord.model_validate(row))


@datastore_guard
def get_attendance_sheet(
    db: Session,
    class_id: int,
    teacher_id: int,
    lesson_date: CalendarDateInput,
    roster: Optional[RosterProvider] = None,
) -> Result[AttendanceSheet]:
    """
    Feuille d'appel : tous les élèves inscrits, avec leur statut enregistré
    pour la séance (None si pas encore saisi).
    """
    if not authorize_teacher_for_class(db, teacher_id, class_id):
        return Result.fail(ErrorKind.UNAUTHORIZED, _UNAUTHORIZED_MESSAGE)

    lesson = resolve_lesson(db, class_id, lesson_date)
    if not lesson.ok:
        return Result.from_error(lesson.error)
    schedule = lesson.value

    roster = roster or SqlRosterProvider(db)
    student_ids = list(roster.student_ids(class_id))
    recorded = {
        row.student_id: row
        for row in db.execute(
            select(Attendance).where(Attendance.schedule_id == schedule.schedule_id)
        ).scalars().all()
    }
    # Un élève désinscrit depuis garde sa ligne de présence sur la feuille
    for student_id in recorded:
        if student_id not in student_ids:
            student_ids.append(student_id)
    names = student_names(db, student_ids)

    entries = []
    for student_id in student_ids:
        row = recorded.get(student_id)
        entries.append(AttendanceSheetEntry(
            student_id=student_id,
            full_name=names.get(student_id),
            status=row.status if row is not None else None,
            note=row.note if row is not None else None,
        ))

    return Result.success(AttendanceSheet(
        schedule_id=schedule.schedule_id,
        lesson_date=normalize_calendar_date(schedule.lesson_date).iso,
        entries=entries,
        statistics=compute_statistics(row.status for row in recorded.values()),
    ))


@datastore_guard
def get_class_report(db: Session, class_id: int, teacher_id: int) -> Result[ClassAttendanceReport]:
    """Statistiques de chaque séance d'une classe, puis totaux sur la classe."""
    if not authorize_teacher_for_class(db, teacher_id, class_id):
        return Result.fail(ErrorKind.UNAUTHORIZED, _UNAUTHORIZED_MESSAGE)

    schedules = db.execute(
        select(Schedule)
        .where(Schedule.class_id == class_id)
        .order_by(Schedule.lesson_date, Schedule.start_time)
    ).scalars().all()
    by_schedule = _statistics_by_schedule(db, [s.schedule_id for s in schedules])

    lessons = [
        LessonStatistics(
            schedule_id=s.schedule_id,
            lesson_date=normalize_calendar_date(s.lesson_date).iso,
            start_time=s.start_time,
            statistics=by_schedule.get(s.schedule_id, AttendanceStatistics()),
        )
        for s in schedules
    ]
    totals = _sum_statistics(lesson.statistics for lesson in lessons)
    return Result.success(ClassAttendanceReport(class_id=class_id, lessons=lessons, totals=totals))


@datastore_guard
def get_student_attendance(db: Session, class_id: int, student_id: int) -> Result[List[StudentAttendanceEntry]]:
    """Historique de présence d'un élève inscrit dans une classe."""
    if not authorize_student_for_class(db, student_id, class_id):
        return Result.fail(ErrorKind.UNAUTHORIZED, _UNAUTHORIZED_MESSAGE)

    rows = db.execute(
        select(Schedule, Attendance)
        .join(Attendance, Attendance.schedule_id == Schedule.schedule_id)
        .where(Schedule.class_id == class_id, Attendance.student_id == student_id)
        .order_by(Schedule.lesson_date, Schedule.start_time)
    ).all()
    return Result.success([
        StudentAttendanceEntry(
            schedule_id=schedule.schedule_id,
            lesson_date=normalize_calendar_date(schedule.lesson_date).iso,
            status=attendance.status,
            note=attendance.note,
        )
        for schedule, attendance in rows
    ])


def compute_statistics(statuses: Iterable[str]) -> AttendanceStatistics:
    counts = Counter(statuses)
    per_status = {status: counts.get(status, 0) for status in ATTENDANCE_STATUSES}
    return AttendanceStatistics(total=sum(per_status.values()), **per_status)


def _statistics_by_schedule(db: Session, schedule_ids: List[int]) -> dict:
    """Une seule requête GROUP BY (séance, statut) pour toutes les séances demandées."""
    if not schedule_ids:
        return {}
    rows = db.execute(
        select(Attendance.schedule_id, Attendance.status, func.count())
        .where(Attendance.schedule_id.in_(schedule_ids))
        .group_by(Attendance.schedule_id, Attendance.status)
    ).all()

    counters = {}
    for schedule_id, status, count in rows:
        counters.setdefault(schedule_id, Counter())[status] += count
    return {schedule_id: compute_statistics(counter.elements()) for schedule_id, counter in counters.items()}


def _sum_statistics(items: Iterable[AttendanceStatistics]) -> AttendanceStatistics:
    totals = Counter()
    for stats in items:
        for status in ATTENDANCE_STATUSES:
            totals[status] += getattr(stats, status)
    return compute_statistics(totals.elements())


def schedule_lock_query(schedule_id: int):
    """SELECT … FOR UPDATE sur la ligne de la séance."""
    return select(Schedule.schedule_id).where(Schedule.schedule_id == schedule_id).with_for_update()


def _lock_schedule(db: Session, schedule_id: int) -> None:
    """
    Verrouille la séance jusqu'à la fin de la transaction. Deux enregistrements
    concurrents de la même séance s'exécutent l'un après l'autre : le second
    attend le commit du premier, son DELETE voit alors les lignes validées et
    le dernier commit l'emporte.
    """
    db.execute(schedule_lock_query(schedule_id))
