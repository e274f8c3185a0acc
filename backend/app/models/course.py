"""
Modèle SQLAlchemy pour les cours du catalogue.
Seuls les champs référencés par les classes sont conservés ici.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, func

from app.database import Base

COURSE_LEVELS = ("Beginner", "Intermediate", "Advanced")


class Course(Base):
    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("level IN ('Beginner', 'Intermediate', 'Advanced')", name="ck_courses_level"),
    )

    course_id = Column(Integer, primary_key=True, autoincrement=True)
    course_name = Column(String(200), nullable=False)
    level = Column(String(20), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
