"""
Modèle SQLAlchemy pour les présences par séance.

Une seule ligne par (séance, élève) : garanti par la contrainte UNIQUE,
pas seulement par le code applicatif.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func

from app.database import Base

ATTENDANCE_STATUSES = ("present", "absent", "late", "excused")


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("schedule_id", "student_id", name="uq_attendance_schedule_student"),
        CheckConstraint(
            "status IN ('present', 'absent', 'late', 'excused')", name="ck_attendance_status"
        ),
    )

    attendance_id = Column(Integer, primary_key=True, autoincrement=True)
    schedule_id = Column(Integer, ForeignKey("schedules.schedule_id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    status = Column(String(10), nullable=False)
    note = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
