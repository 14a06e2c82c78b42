"""
Événements métier émis après commit par le service des demandes.

Ils ne contiennent que des valeurs simples (pas d'objets ORM) pour pouvoir être
traités après la fermeture de la session, en tâche de fond.
"""

import uuid
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class RequestCreated:
    request_id: uuid.UUID
    student_email: str
    student_name: str
    subject: str
    grade_level: str
    description: str
    staff_emails: List[str] = field(default_factory=list)  # admins + tuteurs


@dataclass(frozen=True)
class TutorAssigned:
    request_id: uuid.UUID
    student_email: str
    student_name: str
    tutor_name: str
    subject: str


@dataclass(frozen=True)
class StatusChanged:
    request_id: uuid.UUID
    student_email: str
    student_name: str
    old_status: str
    new_status: str
    subject: str
