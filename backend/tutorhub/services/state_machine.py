"""
Machine à états du statut d'une demande.

    open ──assign──▶ in-progress ──▶ completed
      │                   │
      └──────────▶ cancelled ◀───────┘

Trois chemins modifient le statut :
- la mise à jour générique (PUT /requests/{id}) : uniquement tant que la demande est open ;
- l'assignation d'un tuteur : open → in-progress, uniquement depuis open ;
- l'opération dédiée (PUT /requests/{id}/status) : sans contrôle de l'état de départ,
  sauf si STRICT_STATUS_TRANSITIONS est activé.
"""

from tutorhub.models.enums import RequestStatus

TRANSITIONS = {
    RequestStatus.OPEN: frozenset({RequestStatus.IN_PROGRESS, RequestStatus.CANCELLED}),
    RequestStatus.IN_PROGRESS: frozenset({RequestStatus.COMPLETED, RequestStatus.CANCELLED}),
    RequestStatus.COMPLETED: frozenset(),
    RequestStatus.CANCELLED: frozenset(),
}

STATUS_MESSAGES = {
    RequestStatus.OPEN: "Your request is now open and visible to tutors.",
    RequestStatus.IN_PROGRESS: "Your request has been accepted and is in progress.",
    RequestStatus.COMPLETED: "Congratulations! Your request has been completed.",
    RequestStatus.CANCELLED: "Your request has been cancelled.",
}


def is_legal_transition(current, new) -> bool:
    """Vrai si `new` est un successeur de `current`. Rester sur le même statut est toujours permis."""
    current, new = RequestStatus(current), RequestStatus(new)
    return current == new or new in TRANSITIONS[current]


def can_edit_status(current) -> bool:
    """Le chemin de mise à jour générique n'accepte un statut que si la demande est encore ouverte."""
    return RequestStatus(current) == RequestStatus.OPEN


def can_assign(current) -> bool:
    return RequestStatus(current) == RequestStatus.OPEN


def status_message(status) -> str:
    return STATUS_MESSAGES[RequestStatus(status)]
