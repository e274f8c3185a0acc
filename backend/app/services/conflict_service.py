"""
Détection des doubles réservations (enseignant ou salle) dans l'emploi du temps.

Les séances sont regroupées par créneau exact (jour de semaine, début, fin).
Deux séances qui se chevauchent sans avoir exactement le même créneau
(09:00-10:00 et 09:30-10:30) ne sont PAS signalées : seule l'égalité de
créneau est détectée. Rapport à la demande, jamais bloquant à l'écriture.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Tuple

from sqlalchemy.orm import Session

from app.errors import ErrorKind, Result
from app.schemas.schedule import ConflictEntry, ConflictGroup, ConflictReport, ScheduleResponse, TimeSlot
from app.services.calendar_date import CalendarDateInput
from app.services.datastore import datastore_guard
from app.services.schedule_service import load_lessons_with_teachers, normalize_range

logger = logging.getLogger(__name__)

_DAY_ORDER = {
    day: index
    for index, day in enumerate(
        ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
    )
}


def conflict_type(lessons: List[ScheduleResponse]) -> str:
    """teacher / location / both / none pour les séances d'un même créneau."""
    if len(lessons) <= 1:
        return "none"

    teachers = [lesson.teacher_id for lesson in lessons]
    locations = [lesson.location for lesson in lessons]
    teacher_clash = len(set(teachers)) != len(teachers)
    location_clash = len(set(locations)) != len(locations)

    if teacher_clash and location_clash:
        return "both"
    if teacher_clash:
        return "teacher"
    if location_clash:
        return "location"
    return "none"


def detect_conflicts(lessons: Iterable[ScheduleResponse], only_conflicts: bool = False) -> List[ConflictGroup]:
    """
    Regroupe les séances par créneau et qualifie chaque groupe de plus d'une séance.

    Les séances doivent porter teacher_id (voir load_lessons_with_teachers).
    Groupes triés par jour de semaine puis heure de début et de fin.
    """
    slots: Dict[Tuple, List[ScheduleResponse]] = OrderedDict()
    for lesson in lessons:
        key = (lesson.day_of_week, lesson.start_time, lesson.end_time)
        slots.setdefault(key, []).append(lesson)

    groups = []
    for (day, start_time, end_time), members in sorted(
        slots.items(), key=lambda item: (_DAY_ORDER[item[0][0]], item[0][1], item[0][2])
    ):
        if len(members) < 2:
            continue
        kind = conflict_type(members)
        if only_conflicts and kind == "none":
            continue
        groups.append(ConflictGroup(
            slot=TimeSlot(day=day, start_time=start_time, end_time=end_time),
            conflict_type=kind,
            entries=[
                ConflictEntry(
                    schedule_id=m.schedule_id,
                    class_id=m.class_id,
                    class_name=m.class_name,
                    teacher_id=m.teacher_id,
                    location=m.location,
                    lesson_date=m.lesson_date,
                )
                for m in members
            ],
        ))
    return groups


@datastore_guard
def scan_conflicts(
    db: Session,
    start: CalendarDateInput,
    end: CalendarDateInput,
    max_days: int = 7,
    only_conflicts: bool = False,
) -> Result[ConflictReport]:
    """
    Rapport de conflits pour une période.

    Les créneaux sont indexés par jour de semaine : la période est limitée à
    `max_days` jours pour qu'un même lundi de deux semaines différentes ne
    soit pas comparé à lui-même.
    """
    bounds = normalize_range(start, end)
    if not bounds.ok:
        return Result.from_error(bounds.error)
    first, last = bounds.value

    if (last - first).days + 1 > max_days:
        return Result.fail(
            ErrorKind.VALIDATION_ERROR,
            f"Période trop longue : maximum {max_days} jours par analyse.",
        )

    lessons = load_lessons_with_teachers(db, first, last)
    groups = detect_conflicts(lessons, only_conflicts=only_conflicts)

    flagged = sum(1 for g in groups if g.conflict_type != "none")
    if flagged:
        logger.warning("%d créneau(x) en conflit entre %s et %s", flagged, first, last)
    return Result.success(ConflictReport(conflict_groups=groups))
