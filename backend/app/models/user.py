"""
Modèle SQLAlchemy pour les utilisateurs.
Version minimale : l'authentification est gérée par la passerelle amont,
seuls l'identifiant et le rôle sont utiles au planning et aux présences.
"""

from sqlalchemy import Column, DateTime, Integer, String, func

from app.database import Base

USER_ROLES = ("admin", "teacher", "student")


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    full_name = Column(String(200), nullable=True)
    role = Column(String(20), nullable=False)  # admin, teacher, student
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
