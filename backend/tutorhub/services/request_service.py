"""
Service métier pour les demandes de tutorat.
Gère la création, la consultation, la modification, l'assignation d'un tuteur,
les changements de statut et la suppression.

Ordre des contrôles pour chaque mutation :
  1. garde d'autorisation et données obligatoires
  2. chargement de la demande (404 si absente)
  3. contrôle du statut courant
  4. écriture + commit
  5. publication de l'événement vers le dispatcher (best-effort)
Aucune écriture n'a lieu si une étape 1 à 3 échoue.
"""

import enum
import logging
import math
import uuid
from typing import List, Optional, Union

from sqlalchemy import case, false, func, select, update
from sqlalchemy.orm import Session

from tutorhub.config import settings
from tutorhub.exceptions import ConflictError, InvalidInputError, NotFoundError
from tutorhub.models.enums import Priority, RequestStatus, RequestType, UserRole
from tutorhub.models.student_request import StudentRequest
from tutorhub.models.user import User
from tutorhub.schemas.student_request import (
    AssignTutor,
    Pagination,
    StatusUpdate,
    StudentRequestCreate,
    StudentRequestPage,
    StudentRequestResponse,
    StudentRequestUpdate,
)
from tutorhub.services import state_machine
from tutorhub.services.authorization import RequestAction, authorize
from tutorhub.services.events import RequestCreated, StatusChanged, TutorAssigned
from tutorhub.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)

# Champs modifiables par la mise à jour générique (hors statut)
EDITABLE_FIELDS = ("subject", "description", "grade_level", "request_type", "preferred_schedule", "priority")

PRIORITY_RANK = case(
    {Priority.HIGH.value: 3, Priority.MEDIUM.value: 2, Priority.LOW.value: 1},
    value=StudentRequest.priority,
    else_=0,
)


# ============================================================
# Création
# ============================================================

def create_request(
    db: Session,
    actor: User,
    data: StudentRequestCreate,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> StudentRequestResponse:
    """
    Crée une demande ouverte, sans tuteur, au nom de l'élève connecté.
    Notifie ensuite l'élève (confirmation) et l'équipe (admins + tuteurs).
    """
    authorize(RequestAction.CREATE, actor)

    # Destinataires résolus avant l'écriture : après le commit, plus rien ne doit échouer
    staff_emails = db.execute(
        select(User.email).where(User.role.in_([UserRole.ADMIN.value, UserRole.TUTOR.value]))
    ).scalars().all()

    request = StudentRequest(
        student_id=actor.id,
        subject=data.subject.value,
        description=data.description,
        grade_level=data.grade_level.value,
        request_type=(data.request_type or RequestType.ONGOING).value,
        preferred_schedule=data.preferred_schedule or [],
        priority=(data.priority or Priority.MEDIUM).value,
        status=RequestStatus.OPEN.value,
        assigned_tutor_id=None,
        responses=0,
    )
    db.add(request)
    db.commit()
    db.refresh(request)

    logger.info("Demande créée : %s (%s, %s) par %s", request.id, request.subject, request.grade_level, actor.id)

    _publish(dispatcher, RequestCreated(
        request_id=request.id,
        student_email=actor.email,
        student_name=actor.name,
        subject=request.subject,
        grade_level=request.grade_level,
        description=request.description,
        staff_emails=list(staff_emails),
    ))
    return _to_response(request)


# ============================================================
# Lecture
# ============================================================

def list_requests(
    db: Session,
    status=None,
    subject=None,
    grade_level=None,
    priority=None,
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_SIZE,
) -> StudentRequestPage:
    """Liste publique filtrée par égalité, de la plus récente à la plus ancienne."""
    stmt = _apply_filters(
        select(StudentRequest),
        status=status, subject=subject, grade_level=grade_level, priority=priority,
    )
    return _paginate(db, stmt, [StudentRequest.created_at.desc()], page, limit)


def get_request(db: Session, request_id: Union[str, uuid.UUID]) -> StudentRequestResponse:
    """Retourne une demande avec l'élève et le tuteur expansés. Lève NotFoundError sinon."""
    return _to_response(_load_request(db, request_id))


def get_my_requests(db: Session, actor: User) -> List[StudentRequestResponse]:
    """Toutes les demandes de l'acteur, sans pagination."""
    requests = db.execute(
        select(StudentRequest)
        .where(StudentRequest.student_id == actor.id)
        .order_by(StudentRequest.created_at.desc())
    ).scalars().all()
    return [_to_response(r) for r in requests]


def get_requests_by_subject(
    db: Session,
    subject,
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_SIZE,
) -> StudentRequestPage:
    """Demandes encore ouvertes pour une matière donnée."""
    stmt = _apply_filters(select(StudentRequest), subject=subject, status=RequestStatus.OPEN)
    return _paginate(db, stmt, [StudentRequest.created_at.desc()], page, limit)


def get_tutor_assigned_requests(
    db: Session,
    actor: User,
    status=None,
    tutor_id: Optional[str] = None,
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_SIZE,
) -> StudentRequestPage:
    """
    Un tuteur ne voit que ses propres demandes ; tutor_id est ignoré pour lui.
    Un admin voit toutes les demandes assignées, éventuellement filtrées par tutor_id.
    Tous les statuts sont inclus par défaut.
    """
    authorize(RequestAction.VIEW_ASSIGNED, actor)

    stmt = select(StudentRequest)
    if actor.role == UserRole.TUTOR.value:
        stmt = stmt.where(StudentRequest.assigned_tutor_id == actor.id)
    else:
        stmt = stmt.where(StudentRequest.assigned_tutor_id.is_not(None))
        if tutor_id:
            tutor_uuid = _parse_id(tutor_id)
            # Un identifiant mal formé donne une liste vide, comme un tuteur inconnu
            stmt = stmt.where(StudentRequest.assigned_tutor_id == tutor_uuid) if tutor_uuid else stmt.where(false())

    stmt = _apply_filters(stmt, status=status)
    return _paginate(db, stmt, [StudentRequest.created_at.desc()], page, limit)


def get_available_requests(
    db: Session,
    actor: User,
    subject=None,
    grade_level=None,
    priority=None,
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_SIZE,
) -> StudentRequestPage:
    """Demandes ouvertes sans tuteur, priorité haute d'abord puis les plus récentes."""
    authorize(RequestAction.VIEW_AVAILABLE, actor)

    stmt = (
        select(StudentRequest)
        .where(
            StudentRequest.status == RequestStatus.OPEN.value,
            StudentRequest.assigned_tutor_id.is_(None),
        )
    )
    stmt = _apply_filters(stmt, subject=subject, grade_level=grade_level, priority=priority)
    return _paginate(db, stmt, [PRIORITY_RANK.desc(), StudentRequest.created_at.desc()], page, limit)


# ============================================================
# Modification
# ============================================================

def update_request(
    db: Session,
    actor: User,
    request_id: Union[str, uuid.UUID],
    data: StudentRequestUpdate,
) -> StudentRequestResponse:
    """
    Mise à jour partielle par le propriétaire ou un admin.

    Le statut fourni n'est appliqué que si la demande est encore open ; sinon il est
    ignoré sans erreur. Les autres champs fournis et non vides écrasent les valeurs
    actuelles ; preferredSchedule fourni, même vide, remplace les créneaux.
    Aucune notification sur ce chemin.
    """
    request = _load_request(db, request_id)
    authorize(RequestAction.UPDATE, actor, request)

    if data.status is not None:
        if state_machine.can_edit_status(request.status):
            request.status = data.status.value
        else:
            logger.info(
                "Statut '%s' ignoré pour la demande %s (statut courant : %s)",
                data.status.value, request.id, request.status,
            )

    for field in EDITABLE_FIELDS:
        value = getattr(data, field)
        # Une liste vide efface les créneaux ; seul None signifie "non fourni"
        if value or (field == "preferred_schedule" and value is not None):
            setattr(request, field, _value(value))

    db.commit()
    db.refresh(request)

    logger.info("Demande %s mise à jour par %s", request.id, actor.id)
    return _to_response(request)


def update_request_status(
    db: Session,
    actor: User,
    request_id: Union[str, uuid.UUID],
    data: StatusUpdate,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> StudentRequestResponse:
    """
    Change le statut d'une demande (admins et tuteurs uniquement).

    L'état de départ n'est pas contrôlé : n'importe quel statut peut en remplacer
    un autre. STRICT_STATUS_TRANSITIONS=true impose la machine à états.
    """
    authorize(RequestAction.UPDATE_STATUS, actor)
    request = _load_request(db, request_id)

    old_status = request.status
    new_status = data.status.value

    if settings.STRICT_STATUS_TRANSITIONS and not state_machine.is_legal_transition(old_status, new_status):
        raise ConflictError(f"Cannot change request status from {old_status} to {new_status}")

    request.status = new_status
    db.commit()
    db.refresh(request)

    logger.info("Demande %s : statut %s → %s par %s", request.id, old_status, new_status, actor.id)

    if old_status != new_status:
        _publish(dispatcher, StatusChanged(
            request_id=request.id,
            student_email=request.student.email,
            student_name=request.student.name,
            old_status=old_status,
            new_status=new_status,
            subject=request.subject,
        ))
    return _to_response(request)


def assign_tutor(
    db: Session,
    actor: User,
    request_id: Union[str, uuid.UUID],
    data: AssignTutor,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> StudentRequestResponse:
    """
    Assigne un tuteur à une demande ouverte et la passe en in-progress.

    Validations :
    1. L'acteur est admin
    2. tutorId est fourni
    3. La demande existe
    4. tutorId désigne un utilisateur existant de rôle tutor
    5. La demande est encore open

    L'écriture est conditionnelle (WHERE status = 'open') : si deux assignations
    concurrentes passent les contrôles, une seule est appliquée, l'autre reçoit un 409.
    """
    authorize(RequestAction.ASSIGN_TUTOR, actor)

    if not data.tutor_id:
        raise InvalidInputError("Please provide tutor ID")

    request = _load_request(db, request_id)

    tutor_uuid = _parse_id(data.tutor_id)
    tutor = db.get(User, tutor_uuid) if tutor_uuid else None
    if tutor is None:
        raise NotFoundError("Tutor not found")
    if tutor.role != UserRole.TUTOR.value:
        raise InvalidInputError("Invalid tutor: the selected user is not a tutor")

    if not state_machine.can_assign(request.status):
        raise ConflictError("Can only assign tutor to open requests")

    result = db.execute(
        update(StudentRequest)
        .where(
            StudentRequest.id == request.id,
            StudentRequest.status == RequestStatus.OPEN.value,
        )
        .values(assigned_tutor_id=tutor.id, status=RequestStatus.IN_PROGRESS.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise ConflictError("Can only assign tutor to open requests")

    db.commit()
    db.refresh(request)

    logger.info("Tuteur %s assigné à la demande %s par %s", tutor.id, request.id, actor.id)

    _publish(dispatcher, TutorAssigned(
        request_id=request.id,
        student_email=request.student.email,
        student_name=request.student.name,
        tutor_name=tutor.name,
        subject=request.subject,
    ))
    return _to_response(request)


# ============================================================
# Suppression
# ============================================================

def delete_request(db: Session, actor: User, request_id: Union[str, uuid.UUID]) -> None:
    """Suppression définitive par le propriétaire ou un admin. Pas de cascade, pas de notification."""
    request = _load_request(db, request_id)
    authorize(RequestAction.DELETE, actor, request)

    db.delete(request)
    db.commit()
    logger.info("Demande %s supprimée par %s", request_id, actor.id)


# ============================================================
# Helpers
# ============================================================

def _parse_id(value) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def _load_request(db: Session, request_id) -> StudentRequest:
    """Charge une demande. Identifiant mal formé et identifiant absent donnent la même erreur."""
    parsed = _parse_id(request_id)
    request = db.get(StudentRequest, parsed) if parsed else None
    if request is None:
        raise NotFoundError("Request not found")
    return request


def _value(v):
    return v.value if isinstance(v, enum.Enum) else v


def _apply_filters(stmt, **filters):
    """Ajoute un filtre d'égalité par critère fourni (les valeurs None sont ignorées)."""
    for field, value in filters.items():
        if value is not None:
            stmt = stmt.where(getattr(StudentRequest, field) == _value(value))
    return stmt


def _paginate(db: Session, stmt, order_by, page: int, limit: int) -> StudentRequestPage:
    total = db.execute(
        select(func.count()).select_from(stmt.subquery())
    ).scalar() or 0

    items = db.execute(
        stmt.order_by(*order_by).offset((page - 1) * limit).limit(limit)
    ).scalars().unique().all()

    return StudentRequestPage(
        requests=[_to_response(r) for r in items],
        pagination=Pagination(
            total=total,
            pages=math.ceil(total / limit),
            current_page=page,
            limit=limit,
        ),
    )


def _to_response(request: StudentRequest) -> StudentRequestResponse:
    return StudentRequestResponse.model_validate(request)


def _publish(dispatcher: Optional[NotificationDispatcher], event) -> None:
    (dispatcher or NotificationDispatcher()).publish(event)
