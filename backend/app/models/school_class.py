"""
Modèles SQLAlchemy pour les classes et leurs inscriptions.
Nommé school_class pour éviter le conflit avec le mot-clé Python 'class'.
"""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, func

from app.database import Base


class SchoolClass(Base):
    """Classe d'un cours, confiée à un seul enseignant."""
    __tablename__ = "classes"
    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_classes_dates"),
    )

    class_id = Column(Integer, primary_key=True, autoincrement=True)
    # RESTRICT : un cours ne peut pas être supprimé tant qu'une classe le référence
    course_id = Column(Integer, ForeignKey("courses.course_id", ondelete="RESTRICT"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    class_name = Column(String(200), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    max_students = Column(Integer, nullable=False, default=20)


class ClassStudent(Base):
    """Association classe ↔ élèves (gérée par le module d'inscription)."""
    __tablename__ = "class_students"

    class_id = Column(Integer, ForeignKey("classes.class_id", ondelete="CASCADE"), primary_key=True)
    student_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    enrolled_at = Column(DateTime, server_default=func.now())
