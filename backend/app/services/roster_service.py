"""
Accès à la liste des élèves inscrits d'une classe.

L'inscription appartient au module d'inscription : ce module ne fait que lire
class_students. RosterProvider permet de brancher une autre source.
"""

from typing import Dict, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.school_class import ClassStudent
from app.models.user import User


class RosterProvider(Protocol):
    def student_ids(self, class_id: int) -> List[int]:
        ...


class SqlRosterProvider:
    """Roster lu dans la table class_students."""

    def __init__(self, db: Session):
        self.db = db

    def student_ids(self, class_id: int) -> List[int]:
        return list(self.db.execute(
            select(ClassStudent.student_id)
            .where(ClassStudent.class_id == class_id)
            .order_by(ClassStudent.student_id)
        ).scalars().all())


def student_names(db: Session, student_ids: List[int]) -> Dict[int, Optional[str]]:
    if not student_ids:
        return {}
    rows = db.execute(
        select(User.user_id, User.full_name).where(User.user_id.in_(student_ids))
    ).all()
    return {user_id: full_name for user_id, full_name in rows}
