"""
Service métier pour les séances (planning des classes).

Toute recherche par date passe par normalize_calendar_date() puis compare la
date calendaire de la séance : jamais un timestamp, jamais un préfixe de chaîne.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import ErrorKind, Result
from app.models.schedule import Schedule
from app.models.school_class import SchoolClass
from app.schemas.schedule import LessonCreate, LessonUpdate, ScheduleResponse
from app.services.authorization_service import authorize_student_for_class
from app.services.calendar_date import (
    CalendarDate,
    CalendarDateInput,
    InvalidCalendarDate,
    normalize_calendar_date,
)
from app.services.datastore import datastore_guard

logger = logging.getLogger(__name__)


@datastore_guard
def create_lesson(db: Session, data: LessonCreate, enforce_unique: bool = False) -> Result[ScheduleResponse]:
    """
    Crée une séance pour une classe.

    Échecs :
    - ValidationError si la date est invalide, si start_time >= end_time
      ou si la classe n'existe pas ;
    - DuplicateLesson si `enforce_unique` et qu'une séance existe déjà pour
      cette classe à cette date.
    Sans `enforce_unique`, deux séances le même jour sont acceptées (rattrapage).
    """
    try:
        lesson_date = normalize_calendar_date(data.lesson_date)
    except InvalidCalendarDate as e:
        return Result.fail(ErrorKind.VALIDATION_ERROR, str(e))

    if data.start_time >= data.end_time:
        return Result.fail(ErrorKind.VALIDATION_ERROR, "L'heure de début doit précéder l'heure de fin.")

    school_class = db.get(SchoolClass, data.class_id)
    if school_class is None:
        return Result.fail(ErrorKind.VALIDATION_ERROR, f"Classe {data.class_id} introuvable.")

    if enforce_unique and _lessons_on(db, data.class_id, lesson_date):
        return Result.fail(
            ErrorKind.DUPLICATE_LESSON,
            f"Une séance existe déjà pour la classe {data.class_id} le {lesson_date.iso}.",
        )

    schedule = Schedule(
        class_id=data.class_id,
        lesson_date=lesson_date.to_date(),
        start_time=data.start_time,
        end_time=data.end_time,
        room_or_link=data.location,
    )
    db.add(schedule)
    db.commit()
    db.refresh(schedule)

    logger.info(
        "Séance créée : %s : classe %s le %s (%s-%s, %s)",
        schedule.schedule_id, schedule.class_id, lesson_date.iso,
        schedule.start_time, schedule.end_time, schedule.room_or_link,
    )
    return Result.success(_to_response(schedule, school_class))


@datastore_guard
def find_lesson(db: Session, class_id: int, lesson_date: CalendarDateInput) -> Result[ScheduleResponse]:
    """
    Retourne la séance d'une classe pour une date calendaire.
    LessonNotFound porte la liste des dates existantes pour la classe.
    """
    result = resolve_lesson(db, class_id, lesson_date)
    if not result.ok:
        return Result.from_error(result.error)
    return Result.success(_to_response(result.value))


def resolve_lesson(db: Session, class_id: int, lesson_date: CalendarDateInput) -> Result[Schedule]:
    """
    Résout (classe, date) en ligne Schedule. Partagé par la lecture et
    l'écriture des présences pour qu'elles voient exactement la même séance.

    Si plusieurs séances tombent le même jour, la première par heure de début
    est retenue.
    """
    try:
        target = normalize_calendar_date(lesson_date)
    except InvalidCalendarDate as e:
        return Result.fail(ErrorKind.VALIDATION_ERROR, str(e))

    lessons = _lessons_on(db, class_id, target)
    if lessons:
        return Result.success(lessons[0])

    available = available_dates(db, class_id)
    logger.warning(
        "Aucune séance pour la classe %s le %s : dates disponibles : %s",
        class_id, target.iso, ", ".join(available) or "aucune",
    )
    return Result.fail(
        ErrorKind.LESSON_NOT_FOUND,
        f"Aucune séance pour la classe {class_id} le {target.iso}.",
        available_dates=available,
    )


def available_dates(db: Session, class_id: int) -> List[str]:
    """Dates calendaires (YYYY-MM-DD, croissantes, sans doublon) des séances d'une classe."""
    dates = db.execute(
        select(Schedule.lesson_date)
        .where(Schedule.class_id == class_id)
        .distinct()
        .order_by(Schedule.lesson_date)
    ).scalars().all()
    return [normalize_calendar_date(d).iso for d in dates]


@datastore_guard
def find_lessons_in_range(
    db: Session,
    start: CalendarDateInput,
    end: CalendarDateInput,
    class_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
) -> Result[List[ScheduleResponse]]:
    """
    Séances d'une classe ou d'un enseignant entre deux dates incluses,
    triées par (date, heure de début). Liste matérialisée.
    """
    if class_id is None and teacher_id is None:
        return Result.fail(ErrorKind.VALIDATION_ERROR, "classId ou teacherId est requis.")

    bounds = normalize_range(start, end)
    if not bounds.ok:
        return Result.from_error(bounds.error)
    first, last = bounds.value

    query = (
        select(Schedule, SchoolClass)
        .join(SchoolClass, SchoolClass.class_id == Schedule.class_id)
        .where(Schedule.lesson_date >= first, Schedule.lesson_date <= last)
        .order_by(Schedule.lesson_date, Schedule.start_time, Schedule.schedule_id)
    )
    if class_id is not None:
        query = query.where(Schedule.class_id == class_id)
    if teacher_id is not None:
        query = query.where(SchoolClass.teacher_id == teacher_id)

    rows = db.execute(query).all()
    return Result.success([_to_response(schedule, school_class) for schedule, school_class in rows])


@datastore_guard
def update_lesson(db: Session, schedule_id: int, data: LessonUpdate) -> Result[ScheduleResponse]:
    """
    Corrige l'horaire et/ou le lieu d'une séance. La date et la classe ne
    changent jamais : une séance déplacée est une nouvelle séance.
    """
    schedule = db.get(Schedule, schedule_id)
    if schedule is None:
        return Result.fail(ErrorKind.LESSON_NOT_FOUND, f"Séance {schedule_id} introuvable.")

    start_time = data.start_time if data.start_time is not None else schedule.start_time
    end_time = data.end_time if data.end_time is not None else schedule.end_time
    if start_time >= end_time:
        return Result.fail(ErrorKind.VALIDATION_ERROR, "L'heure de début doit précéder l'heure de fin.")

    schedule.start_time = start_time
    schedule.end_time = end_time
    if data.location is not None:
        schedule.room_or_link = data.location

    db.commit()
    db.refresh(schedule)
    logger.info("Séance %s corrigée : %s-%s, %s", schedule_id, start_time, end_time, schedule.room_or_link)
    return Result.success(_to_response(schedule))


@datastore_guard
def get_student_schedules(db: Session, class_id: int, student_id: int) -> Result[List[ScheduleResponse]]:
    """Séances d'une classe, visibles uniquement par un élève inscrit."""
    if not authorize_student_for_class(db, student_id, class_id):
        return Result.fail(ErrorKind.UNAUTHORIZED, "Accès refusé à cette classe.")

    schedules = db.execute(
        select(Schedule)
        .where(Schedule.class_id == class_id)
        .order_by(Schedule.lesson_date, Schedule.start_time)
    ).scalars().all()
    return Result.success([_to_response(s) for s in schedules])


def load_lessons_with_teachers(db: Session, first: date, last: date) -> List[ScheduleResponse]:
    """Toutes les séances de la période, enrichies de l'enseignant de leur classe."""
    rows = db.execute(
        select(Schedule, SchoolClass)
        .join(SchoolClass, SchoolClass.class_id == Schedule.class_id)
        .where(Schedule.lesson_date >= first, Schedule.lesson_date <= last)
        .order_by(Schedule.lesson_date, Schedule.start_time, Schedule.schedule_id)
    ).all()
    return [_to_response(schedule, school_class) for schedule, school_class in rows]


def normalize_range(start: CalendarDateInput, end: CalendarDateInput) -> Result[tuple]:
    try:
        first = normalize_calendar_date(start)
        last = normalize_calendar_date(end)
    except InvalidCalendarDate as e:
        return Result.fail(ErrorKind.VALIDATION_ERROR, str(e))
    if first > last:
        return Result.fail(ErrorKind.VALIDATION_ERROR, "La date de début doit précéder la date de fin.")
    return Result.success((first.to_date(), last.to_date()))


def _lessons_on(db: Session, class_id: int, lesson_date: CalendarDate) -> List[Schedule]:
    return list(db.execute(
        select(Schedule)
        .where(Schedule.class_id == class_id, Schedule.lesson_date == lesson_date.to_date())
        .order_by(Schedule.start_time, Schedule.schedule_id)
    ).scalars().all())


def _to_response(schedule: Schedule, school_class: Optional[SchoolClass] = None) -> ScheduleResponse:
    """Construit l'enregistrement typé d'une séance à la frontière d'accès aux données."""
    lesson_date = normalize_calendar_date(schedule.lesson_date)
    return ScheduleResponse(
        schedule_id=schedule.schedule_id,
        class_id=schedule.class_id,
        lesson_date=lesson_date.iso,
        day_of_week=lesson_date.weekday_name,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        location=schedule.room_or_link,
        class_name=school_class.class_name if school_class is not None else None,
        teacher_id=school_class.teacher_id if school_class is not None else None,
    )
