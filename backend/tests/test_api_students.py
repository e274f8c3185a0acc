"""
Tests d'intégration API pour la consultation élève.
"""

from conftest import ADMIN_ID, TEACHER_ID, auth


def test_student_schedules(client, seeded):
    response = client.get("/api/v1/students/4/classes/1/schedules", headers=auth(4, "student"))

    assert response.status_code == 200
    assert [s["lessonDate"] for s in response.json()["schedules"]] == ["2025-10-02", "2025-10-04"]


def test_student_schedules_classe_non_suivie(client, seeded):
    response = client.get("/api/v1/students/6/classes/1/schedules", headers=auth(6, "student"))
    assert response.status_code == 403
    assert response.json()["kind"] == "Unauthorized"


def test_student_schedules_autre_eleve(client, seeded):
    response = client.get("/api/v1/students/5/classes/1/schedules", headers=auth(4, "student"))
    assert response.status_code == 403


def test_student_schedules_admin(client, seeded):
    response = client.get("/api/v1/students/4/classes/1/schedules", headers=auth(ADMIN_ID, "admin"))
    assert response.status_code == 200


def test_student_attendance(client, seeded):
    client.post(
        "/api/v1/attendance",
        json={
            "classId": 1,
            "teacherId": TEACHER_ID,
            "date": "2025-10-04",
            "attendance": [{"studentId": 4, "status": "late"}, {"studentId": 5, "status": "present"}],
        },
        headers=auth(TEACHER_ID, "teacher"),
    )

    response = client.get("/api/v1/students/4/classes/1/attendance", headers=auth(4, "student"))

    assert response.status_code == 200
    records = response.json()["records"]
    assert [(r["lessonDate"], r["status"]) for r in records] == [("2025-10-04", "late")]


def test_student_attendance_enseignant_refuse(client, seeded):
    response = client.get("/api/v1/students/4/classes/1/attendance", headers=auth(TEACHER_ID, "teacher"))
    assert response.status_code == 403


def test_identite_mal_formee(client, seeded):
    response = client.get("/api/v1/students/4/classes/1/attendance", headers=auth(4, "janitor"))
    assert response.status_code == 401
