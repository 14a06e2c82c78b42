"""
Garde d'autorisation des demandes de tutorat.

Fonctions pures : aucune lecture en base, aucune écriture. Chaque action est décrite
par une règle (rôles autorisés, propriétaire autorisé, texte de refus) ; les services
appellent authorize() avant toute mutation ou lecture restreinte.
"""

import enum
import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional

from tutorhub.exceptions import AuthorizationError
from tutorhub.models.enums import UserRole

logger = logging.getLogger(__name__)

ALL_ROLES = frozenset(UserRole)


class RequestAction(str, enum.Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    UPDATE_STATUS = "update_status"
    ASSIGN_TUTOR = "assign_tutor"
    VIEW_ASSIGNED = "view_assigned"
    VIEW_AVAILABLE = "view_available"


@dataclass(frozen=True)
class Rule:
    roles: FrozenSet[UserRole]
    owner_allowed: bool
    denial: str


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""


RULES = {
    RequestAction.CREATE: Rule(
        frozenset({UserRole.STUDENT}), False,
        "Only students can create requests.",
    ),
    RequestAction.READ: Rule(ALL_ROLES, False, ""),
    RequestAction.UPDATE: Rule(
        frozenset({UserRole.ADMIN}), True,
        "Only the request owner or admin can update this request.",
    ),
    RequestAction.DELETE: Rule(
        frozenset({UserRole.ADMIN}), True,
        "Only the request owner or admin can delete this request.",
    ),
    # Le propriétaire seul ne suffit pas : chemin réservé aux admins et tuteurs
    RequestAction.UPDATE_STATUS: Rule(
        frozenset({UserRole.ADMIN, UserRole.TUTOR}), False,
        "Only admins and tutors can update request status.",
    ),
    RequestAction.ASSIGN_TUTOR: Rule(
        frozenset({UserRole.ADMIN}), False,
        "Only admins can assign tutors.",
    ),
    RequestAction.VIEW_ASSIGNED: Rule(
        frozenset({UserRole.ADMIN, UserRole.TUTOR}), False,
        "Only admins and tutors can view assigned requests.",
    ),
    RequestAction.VIEW_AVAILABLE: Rule(
        frozenset({UserRole.ADMIN, UserRole.TUTOR}), False,
        "Only admins and tutors can view available requests.",
    ),
}


def _role_of(actor) -> Optional[UserRole]:
    try:
        return UserRole(actor.role)
    except ValueError:
        return None


def is_owner(actor, request) -> bool:
    """Vrai si l'acteur est l'élève qui a créé la demande."""
    return request is not None and request.student_id == actor.id


def check_permission(action: RequestAction, actor, request=None) -> Decision:
    """
    Décide si `actor` peut effectuer `action` sur `request`.
    `request` n'est requis que pour les règles qui autorisent le propriétaire.
    """
    rule = RULES[action]
    role = _role_of(actor)

    if role in rule.roles:
        return Decision(True)
    if rule.owner_allowed and is_owner(actor, request):
        return Decision(True)

    return Decision(False, f"Not authorized. {rule.denial} Your role: {actor.role}")


def authorize(action: RequestAction, actor, request=None) -> None:
    """Comme check_permission, mais lève AuthorizationError en cas de refus."""
    decision = check_permission(action, actor, request)
    if not decision.allowed:
        logger.warning(
            "Accès refusé : action=%s acteur=%s rôle=%s demande=%s",
            action.value, actor.id, actor.role, getattr(request, "id", None),
        )
        raise AuthorizationError(decision.reason)
