"""
Tests du service de planning : création, résolution (classe, date),
recherche par période, correction et consultation élève.
"""

from datetime import date, time

import pytest
from pydantic import ValidationError

from app.errors import ErrorKind
from app.models.schedule import Schedule
from app.schemas.schedule import LessonCreate, LessonUpdate
from app.services.schedule_service import (
    available_dates,
    create_lesson,
    find_lesson,
    find_lessons_in_range,
    get_student_schedules,
    update_lesson,
)

from conftest import OTHER_TEACHER_ID, TEACHER_ID


def lesson_payload(**kwargs) -> LessonCreate:
    return LessonCreate(
        class_id=kwargs.get("class_id", 1),
        lesson_date=kwargs.get("lesson_date", "2025-10-09"),
        start_time=kwargs.get("start_time", time(9, 0)),
        end_time=kwargs.get("end_time", time(11, 0)),
        location=kwargs.get("location", "Room A"),
    )


# --- Validation des schémas ---

def test_lesson_create_lieu_vide_rejete():
    with pytest.raises(ValidationError):
        lesson_payload(location="   ")


def test_lesson_create_alias_camel_case():
    data = LessonCreate.model_validate({
        "classId": 1, "lessonDate": "2025-10-09", "startTime": "09:00", "endTime": "10:00", "location": "B12",
    })
    assert data.class_id == 1
    assert data.start_time == time(9, 0)


def test_lesson_update_vide_rejete():
    with pytest.raises(ValidationError):
        LessonUpdate()


# --- create_lesson ---

def test_create_lesson_succes(seeded):
    result = create_lesson(seeded, lesson_payload(lesson_date="2025-10-09T00:00:00Z"))

    assert result.ok
    assert result.value.lesson_date == "2025-10-09"
    assert result.value.day_of_week == "Thursday"
    assert result.value.teacher_id == TEACHER_ID
    assert seeded.get(Schedule, result.value.schedule_id).lesson_date == date(2025, 10, 9)


@pytest.mark.parametrize("start,end", [(time(11, 0), time(9, 0)), (time(9, 0), time(9, 0))])
def test_create_lesson_horaire_invalide(seeded, start, end):
    result = create_lesson(seeded, lesson_payload(start_time=start, end_time=end))
    assert result.error.kind is ErrorKind.VALIDATION_ERROR


def test_create_lesson_date_invalide(seeded):
    result = create_lesson(seeded, lesson_payload(lesson_date="2025-02-30"))
    assert result.error.kind is ErrorKind.VALIDATION_ERROR


def test_create_lesson_classe_inexistante(seeded):
    result = create_lesson(seeded, lesson_payload(class_id=999))
    assert result.error.kind is ErrorKind.VALIDATION_ERROR
    assert "introuvable" in result.error.message


def test_create_lesson_meme_jour_autorise_par_defaut(seeded):
    """Séance de rattrapage le même jour : acceptée sans le mode strict."""
    result = create_lesson(seeded, lesson_payload(lesson_date="2025-10-02", start_time=time(14, 0), end_time=time(15, 0)))
    assert result.ok
    assert seeded.query(Schedule).filter(Schedule.class_id == 1, Schedule.lesson_date == date(2025, 10, 2)).count() == 2


def test_create_lesson_meme_jour_refuse_en_mode_strict(seeded):
    result = create_lesson(
        seeded,
        lesson_payload(lesson_date="2025-10-02T18:00:00+02:00", start_time=time(14, 0), end_time=time(15, 0)),
        enforce_unique=True,
    )
    assert result.error.kind is ErrorKind.DUPLICATE_LESSON


# --- find_lesson ---

def test_find_lesson_introuvable_liste_les_dates(seeded):
    result = find_lesson(seeded, 1, "2025-10-01")

    assert not result.ok
    assert result.error.kind is ErrorKind.LESSON_NOT_FOUND
    assert result.error.available_dates == ["2025-10-02", "2025-10-04"]


@pytest.mark.parametrize("representation", [
    "2025-10-02T00:00:00.000Z",
    "2025-10-02T23:59:59+09:00",
    "2025-10-02T01:00:00-08:00",
    date(2025, 10, 2),
])
def test_find_lesson_meme_seance_quelle_que_soit_la_representation(seeded, representation):
    reference = find_lesson(seeded, 1, "2025-10-02")
    other = find_lesson(seeded, 1, representation)

    assert reference.ok and other.ok
    assert other.value.schedule_id == reference.value.schedule_id == 10


def test_find_lesson_classe_sans_seance(seeded):
    result = find_lesson(seeded, 2, "2025-10-02")
    assert result.error.kind is ErrorKind.LESSON_NOT_FOUND
    assert result.error.available_dates == []


def test_find_lesson_plusieurs_seances_premiere_par_heure(seeded):
    create_lesson(seeded, lesson_payload(lesson_date="2025-10-02", start_time=time(7, 0), end_time=time(8, 0)))
    result = find_lesson(seeded, 1, "2025-10-02")
    assert result.value.start_time == time(7, 0)


def test_available_dates_sans_doublon(seeded):
    create_lesson(seeded, lesson_payload(lesson_date="2025-10-04", start_time=time(14, 0), end_time=time(15, 0)))
    assert available_dates(seeded, 1) == ["2025-10-02", "2025-10-04"]


# --- find_lessons_in_range ---

def test_find_lessons_in_range_par_classe_trie(seeded):
    create_lesson(seeded, lesson_payload(lesson_date="2025-10-02", start_time=time(7, 0), end_time=time(8, 0)))
    result = find_lessons_in_range(seeded, "2025-10-01", "2025-10-31", class_id=1)

    assert result.ok
    keys = [(s.lesson_date, s.start_time) for s in result.value]
    assert keys == sorted(keys)
    assert len(keys) == 3


def test_find_lessons_in_range_bornes_incluses(seeded):
    result = find_lessons_in_range(seeded, "2025-10-02", "2025-10-04", class_id=1)
    assert [s.schedule_id for s in result.value] == [10, 11]


def test_find_lessons_in_range_par_enseignant(seeded):
    assert len(find_lessons_in_range(seeded, "2025-10-01", "2025-10-07", teacher_id=TEACHER_ID).value) == 2
    assert find_lessons_in_range(seeded, "2025-10-01", "2025-10-07", teacher_id=OTHER_TEACHER_ID).value == []


def test_find_lessons_in_range_sans_filtre(seeded):
    result = find_lessons_in_range(seeded, "2025-10-01", "2025-10-07")
    assert result.error.kind is ErrorKind.VALIDATION_ERROR


def test_find_lessons_in_range_bornes_inversees(seeded):
    result = find_lessons_in_range(seeded, "2025-10-07", "2025-10-01", class_id=1)
    assert result.error.kind is ErrorKind.VALIDATION_ERROR


# --- update_lesson ---

def test_update_lesson_correction_salle(seeded):
    result = update_lesson(seeded, 10, LessonUpdate(location="https://meet.example/ge-a"))
    assert result.ok
    assert result.value.location == "https://meet.example/ge-a"
    assert result.value.lesson_date == "2025-10-02"


def test_update_lesson_horaire_incoherent(seeded):
    result = update_lesson(seeded, 10, LessonUpdate(start_time=time(12, 0)))
    assert result.error.kind is ErrorKind.VALIDATION_ERROR
    assert seeded.get(Schedule, 10).start_time == time(9, 0)


def test_update_lesson_inexistante(seeded):
    result = update_lesson(seeded, 999, LessonUpdate(location="B1"))
    assert result.error.kind is ErrorKind.LESSON_NOT_FOUND


# --- get_student_schedules ---

def test_student_schedules_inscrit(seeded):
    result = get_student_schedules(seeded, 1, 4)
    assert [s.lesson_date for s in result.value] == ["2025-10-02", "2025-10-04"]


def test_student_schedules_non_inscrit(seeded):
    result = get_student_schedules(seeded, 1, 6)
    assert result.error.kind is ErrorKind.UNAUTHORIZED
