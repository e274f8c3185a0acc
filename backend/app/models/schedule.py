"""
Modèle SQLAlchemy pour les séances (une occurrence datée d'une classe).

lesson_date est une date calendaire pure : aucune heure, aucun fuseau.
Pas de contrainte UNIQUE(class_id, lesson_date) : les séances de rattrapage
le même jour sont légitimes (voir ENFORCE_UNIQUE_LESSON_PER_DAY).
"""

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Index, Integer, String, Time

from app.database import Base


class Schedule(Base):
    __tablename__ = "schedules"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_schedules_times"),
        Index("ix_schedules_class_date", "class_id", "lesson_date"),
    )

    schedule_id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.class_id", ondelete="CASCADE"), nullable=False)
    lesson_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    room_or_link = Column(String(500), nullable=False)
