"""
Contrôles d'accès aux classes.

Vérifications pures, sans effet de bord. Un résultat False doit être traité
comme Unauthorized par l'appelant, jamais comme « introuvable » : on ne révèle
pas l'existence d'une classe à un utilisateur qui n'y a pas accès.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.school_class import ClassStudent, SchoolClass


def authorize_teacher_for_class(db: Session, teacher_id: int, class_id: int) -> bool:
    """True si la classe existe et lui est confiée."""
    found = db.execute(
        select(SchoolClass.class_id).where(
            SchoolClass.class_id == class_id,
            SchoolClass.teacher_id == teacher_id,
        )
    ).scalar()
    return found is not None


def authorize_student_for_class(db: Session, student_id: int, class_id: int) -> bool:
    """True si une inscription relie l'élève à la classe."""
    found = db.execute(
        select(ClassStudent.student_id).where(
            ClassStudent.class_id == class_id,
            ClassStudent.student_id == student_id,
        )
    ).scalar()
    return found is not None
