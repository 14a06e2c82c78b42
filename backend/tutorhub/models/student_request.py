"""
Modèle SQLAlchemy pour les demandes de tutorat des élèves.

Les références vers les utilisateurs (élève créateur, tuteur assigné) sont stockées
par identifiant ; les relations ne servent qu'à l'expansion dans les réponses.
"""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text, Uuid
from sqlalchemy.orm import relationship

from tutorhub.database import Base
from tutorhub.models.enums import GradeLevel, Priority, RequestStatus, RequestType
from tutorhub.models.user import _utcnow

DESCRIPTION_MAX_LENGTH = 1000


class StudentRequest(Base):
    __tablename__ = "student_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)  # immuable
    subject = Column(String(50), nullable=False, index=True)
    description = Column(Text, nullable=False)
    grade_level = Column(String(20), nullable=False, default=GradeLevel.GRADE_10.value)
    request_type = Column(String(20), nullable=False, default=RequestType.ONGOING.value)
    preferred_schedule = Column(JSON, nullable=False, default=list)
    priority = Column(String(10), nullable=False, default=Priority.MEDIUM.value)
    status = Column(String(20), nullable=False, default=RequestStatus.OPEN.value, index=True)
    assigned_tutor_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    # Compteur conservé pour compatibilité, aucune opération ne l'incrémente
    responses = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    student = relationship("User", foreign_keys=[student_id], lazy="joined")
    assigned_tutor = relationship("User", foreign_keys=[assigned_tutor_id], lazy="joined")

    def __repr__(self) -> str:
        return f"<StudentRequest(id={self.id}, subject={self.subject}, status={self.status})>"
