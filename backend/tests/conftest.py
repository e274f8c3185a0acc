"""
Configuration partagée pour tous les tests.

Base SQLite en mémoire (StaticPool) : les transactions, les rollbacks et la
contrainte UNIQUE(schedule_id, student_id) sont réellement exercés.
"""

from datetime import date, time

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import Base
from app.main import create_app
from app.models.course import Course
from app.models.schedule import Schedule
from app.models.school_class import ClassStudent, SchoolClass
from app.models.user import User

ADMIN_ID = 1
TEACHER_ID = 2
OTHER_TEACHER_ID = 3
STUDENT_IDS = (4, 5, 6)


@pytest.fixture
def app_instance():
    application = create_app(Settings(DATABASE_URL="sqlite://", LOG_LEVEL="WARNING"))
    Base.metadata.create_all(application.state.engine)
    yield application
    Base.metadata.drop_all(application.state.engine)
    application.state.engine.dispose()


@pytest.fixture
def session_factory(app_instance):
    return app_instance.state.session_factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def seed(db) -> None:
    """
    Jeu de données de référence :
    - enseignant 2 titulaire de la classe 1, enseignant 3 titulaire de la classe 2
    - élèves 4 et 5 inscrits en classe 1, élève 6 inscrit en classe 2
    - classe 1 : séances le 2025-10-02 et le 2025-10-04
    """
    db.add_all([
        User(user_id=ADMIN_ID, email="admin@school.test", full_name="Admin", role="admin"),
        User(user_id=TEACHER_ID, email="t2@school.test", full_name="Teacher Two", role="teacher"),
        User(user_id=OTHER_TEACHER_ID, email="t3@school.test", full_name="Teacher Three", role="teacher"),
        User(user_id=4, email="s4@school.test", full_name="Student Four", role="student"),
        User(user_id=5, email="s5@school.test", full_name="Student Five", role="student"),
        User(user_id=6, email="s6@school.test", full_name="Student Six", role="student"),
    ])
    db.add(Course(course_id=1, course_name="General English", level="Beginner"))
    db.flush()
    db.add_all([
        SchoolClass(
            class_id=1, course_id=1, teacher_id=TEACHER_ID, class_name="GE-A",
            start_date=date(2025, 9, 1), end_date=date(2025, 12, 19), max_students=12,
        ),
        SchoolClass(
            class_id=2, course_id=1, teacher_id=OTHER_TEACHER_ID, class_name="GE-B",
            start_date=date(2025, 9, 1), end_date=date(2025, 12, 19), max_students=12,
        ),
    ])
    db.flush()
    db.add_all([
        ClassStudent(class_id=1, student_id=4),
        ClassStudent(class_id=1, student_id=5),
        ClassStudent(class_id=2, student_id=6),
        Schedule(
            schedule_id=10, class_id=1, lesson_date=date(2025, 10, 2),
            start_time=time(9, 0), end_time=time(11, 0), room_or_link="Room A",
        ),
        Schedule(
            schedule_id=11, class_id=1, lesson_date=date(2025, 10, 4),
            start_time=time(9, 0), end_time=time(11, 0), room_or_link="Room A",
        ),
    ])
    db.commit()


@pytest.fixture
def seeded(db):
    seed(db)
    return db


@pytest.fixture
def client(app_instance):
    with TestClient(app_instance) as c:
        yield c


def auth(user_id: int, role: str) -> dict:
    """En-têtes transmis par la passerelle d'authentification."""
    return {"X-User-Id": str(user_id), "X-User-Role": role}
