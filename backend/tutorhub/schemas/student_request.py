"""
Schémas Pydantic pour les demandes de tutorat.

Le JSON échangé avec le frontend est en camelCase (gradeLevel, assignedTutor…) ;
côté Python les champs restent en snake_case grâce à l'alias_generator.
Les deux formes sont acceptées en entrée.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tutorhub.models.enums import GradeLevel, Priority, RequestStatus, RequestType, Subject
from tutorhub.models.student_request import DESCRIPTION_MAX_LENGTH


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _clean_schedule(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    return [slot.strip() for slot in v if slot and slot.strip()]


class StudentRequestCreate(CamelModel):
    """Corps de POST /requests. subject, description et gradeLevel sont obligatoires."""
    subject: Subject
    description: str = Field(max_length=DESCRIPTION_MAX_LENGTH)
    grade_level: GradeLevel
    request_type: Optional[RequestType] = None
    preferred_schedule: Optional[List[str]] = None
    priority: Optional[Priority] = None

    @field_validator("description")
    @classmethod
    def description_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Description cannot be empty.")
        return v.strip()

    @field_validator("preferred_schedule")
    @classmethod
    def schedule_without_blanks(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_schedule(v)


class StudentRequestUpdate(CamelModel):
    """
    Corps de PUT /requests/{id}. Mise à jour partielle : seuls les champs fournis changent.
    Le statut n'est pris en compte que si la demande est encore ouverte.
    """
    subject: Optional[Subject] = None
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    grade_level: Optional[GradeLevel] = None
    request_type: Optional[RequestType] = None
    preferred_schedule: Optional[List[str]] = None
    priority: Optional[Priority] = None
    status: Optional[RequestStatus] = None

    @field_validator("description")
    @classmethod
    def description_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Description cannot be empty.")
        return v.strip() if v else v

    @field_validator("preferred_schedule")
    @classmethod
    def schedule_without_blanks(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_schedule(v)


class StatusUpdate(CamelModel):
    """Corps de PUT /requests/{id}/status."""
    status: RequestStatus


class AssignTutor(CamelModel):
    """
    Corps de PUT /requests/{id}/assign-tutor.
    tutorId reste optionnel ici : son absence est refusée par le service avec un message dédié.
    """
    tutor_id: Optional[str] = None


class UserSummary(CamelModel):
    """Référence utilisateur expansée dans les réponses."""
    id: uuid.UUID
    name: str
    email: str
    avatar: Optional[str] = ""


class StudentRequestResponse(CamelModel):
    id: uuid.UUID
    student: Optional[UserSummary]
    subject: Subject
    description: str
    grade_level: GradeLevel
    request_type: RequestType
    preferred_schedule: List[str] = []
    priority: Priority
    status: RequestStatus
    assigned_tutor: Optional[UserSummary] = None
    responses: int = 0
    created_at: datetime
    updated_at: datetime


class StudentRequestEnvelope(CamelModel):
    """Réponse des opérations de mutation : message + demande à jour."""
    message: str
    request: StudentRequestResponse


class Pagination(CamelModel):
    total: int
    pages: int
    current_page: int
    limit: int


class StudentRequestPage(CamelModel):
    requests: List[StudentRequestResponse]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str
