"""
Modèle SQLAlchemy pour les utilisateurs.
Version minimale : le hash du mot de passe et la connexion sont gérés hors de ce service.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Uuid

from tutorhub.database import Base
from tutorhub.models.enums import UserRole


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    avatar = Column(String(500), nullable=False, default="")
    role = Column(String(20), nullable=False, default=UserRole.STUDENT.value)  # student, tutor, admin
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
