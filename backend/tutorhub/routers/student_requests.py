"""
Router pour les demandes de tutorat.

Ordre d'enregistrement : les chemins fixes (/my-requests, /tutor/…, /subject/…)
doivent précéder /{request_id}, sinon l'identifiant capture le mot-clé.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tutorhub.config import settings
from tutorhub.database import get_db
from tutorhub.models.enums import GradeLevel, Priority, RequestStatus, Subject
from tutorhub.models.user import User
from tutorhub.schemas.student_request import (
    AssignTutor,
    MessageResponse,
    StatusUpdate,
    StudentRequestCreate,
    StudentRequestEnvelope,
    StudentRequestPage,
    StudentRequestResponse,
    StudentRequestUpdate,
)
from tutorhub.security import get_current_user
from tutorhub.services import request_service
from tutorhub.services.notification_service import NotificationDispatcher, get_dispatcher

router = APIRouter(prefix="/api/v1/requests", tags=["Demandes de tutorat"])

PageParam = Annotated[int, Query(ge=1, description="Numéro de page (à partir de 1)")]
LimitParam = Annotated[int, Query(ge=1, le=settings.MAX_PAGE_SIZE, description="Taille de page")]


# ============================================================
# Routes authentifiées à chemin fixe
# ============================================================

@router.post("", response_model=StudentRequestEnvelope, status_code=201, summary="Créer une demande")
def create_request(
    data: StudentRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Crée une demande de tutorat (élèves uniquement).
    La demande démarre en statut open, sans tuteur.
    L'élève et l'équipe sont notifiés par email après la réponse.
    """
    request = request_service.create_request(db, current_user, data, dispatcher)
    return StudentRequestEnvelope(message="Request created successfully", request=request)


@router.get("/my-requests", response_model=List[StudentRequestResponse], summary="Mes demandes")
def get_my_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Retourne toutes les demandes de l'utilisateur connecté, de la plus récente à la plus ancienne."""
    return request_service.get_my_requests(db, current_user)


@router.get("/tutor/assigned", response_model=StudentRequestPage, summary="Demandes assignées")
def get_tutor_assigned_requests(
    status: Optional[RequestStatus] = None,
    tutor_id: Optional[str] = Query(None, alias="tutorId"),
    page: PageParam = 1,
    limit: LimitParam = settings.DEFAULT_PAGE_SIZE,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Tuteur : ses propres demandes assignées.
    Admin : toutes les demandes assignées, filtrables par tutorId.
    Tous les statuts sont retournés sauf filtre explicite.
    """
    return request_service.get_tutor_assigned_requests(
        db, current_user, status=status, tutor_id=tutor_id, page=page, limit=limit,
    )


@router.get("/tutor/available", response_model=StudentRequestPage, summary="Demandes disponibles")
def get_available_requests(
    subject: Optional[Subject] = None,
    grade_level: Optional[GradeLevel] = Query(None, alias="gradeLevel"),
    priority: Optional[Priority] = None,
    page: PageParam = 1,
    limit: LimitParam = settings.DEFAULT_PAGE_SIZE,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Demandes ouvertes et sans tuteur (tuteurs et admins), priorité haute d'abord."""
    return request_service.get_available_requests(
        db, current_user, subject=subject, grade_level=grade_level, priority=priority,
        page=page, limit=limit,
    )


# ============================================================
# Routes publiques
# ============================================================

@router.get("", response_model=StudentRequestPage, summary="Lister les demandes")
def list_requests(
    status: Optional[RequestStatus] = None,
    subject: Optional[Subject] = None,
    grade_level: Optional[GradeLevel] = Query(None, alias="gradeLevel"),
    priority: Optional[Priority] = None,
    page: PageParam = 1,
    limit: LimitParam = settings.DEFAULT_PAGE_SIZE,
    db: Session = Depends(get_db),
):
    """Liste paginée, filtrable par statut, matière, niveau et priorité."""
    return request_service.list_requests(
        db, status=status, subject=subject, grade_level=grade_level, priority=priority,
        page=page, limit=limit,
    )


@router.get("/subject/{subject}", response_model=StudentRequestPage, summary="Demandes ouvertes par matière")
def get_requests_by_subject(
    subject: Subject,
    page: PageParam = 1,
    limit: LimitParam = settings.DEFAULT_PAGE_SIZE,
    db: Session = Depends(get_db),
):
    """Demandes encore ouvertes pour la matière donnée."""
    return request_service.get_requests_by_subject(db, subject, page=page, limit=limit)


# ============================================================
# Actions spécifiques (avant les routes génériques /{request_id})
# ============================================================

@router.put("/{request_id}/assign-tutor", response_model=StudentRequestEnvelope, summary="Assigner un tuteur")
def assign_tutor(
    request_id: str,
    data: AssignTutor,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Assigne un tuteur à une demande ouverte (admins uniquement).
    La demande passe en in-progress et l'élève est prévenu par email.
    """
    request = request_service.assign_tutor(db, current_user, request_id, data, dispatcher)
    return StudentRequestEnvelope(message="Tutor assigned successfully", request=request)


@router.put("/{request_id}/status", response_model=StudentRequestEnvelope, summary="Changer le statut")
def update_request_status(
    request_id: str,
    data: StatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Change le statut d'une demande (admins et tuteurs). L'élève est prévenu par email."""
    request = request_service.update_request_status(db, current_user, request_id, data, dispatcher)
    return StudentRequestEnvelope(message="Status updated successfully", request=request)


# ============================================================
# Routes génériques /{request_id}
# ============================================================

@router.get("/{request_id}", response_model=StudentRequestResponse, summary="Détail d'une demande")
def get_request(request_id: str, db: Session = Depends(get_db)):
    """Retourne une demande par son ID, avec l'élève et le tuteur assigné."""
    return request_service.get_request(db, request_id)


@router.put("/{request_id}", response_model=StudentRequestEnvelope, summary="Modifier une demande")
def update_request(
    request_id: str,
    data: StudentRequestUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Mise à jour partielle par le propriétaire ou un admin.
    Un statut fourni est ignoré si la demande n'est plus ouverte.
    """
    request = request_service.update_request(db, current_user, request_id, data)
    return StudentRequestEnvelope(message="Request updated successfully", request=request)


@router.delete("/{request_id}", response_model=MessageResponse, summary="Supprimer une demande")
def delete_request(
    request_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Supprime définitivement une demande (propriétaire ou admin)."""
    request_service.delete_request(db, current_user, request_id)
    return MessageResponse(message="Request deleted successfully")
