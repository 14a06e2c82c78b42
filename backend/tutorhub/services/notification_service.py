"""
Distribution des événements métier vers les notifications email.

Le service des demandes publie un événement après commit ; ce module décide quels
emails envoyer. C'est la seule frontière où les échecs de notification sont capturés :
ils sont journalisés ici et ne remontent jamais jusqu'à la réponse HTTP.

Avec des BackgroundTasks FastAPI, l'envoi a lieu après l'envoi de la réponse ;
sans, il a lieu immédiatement (scripts, tests).
"""

import logging
from typing import Optional

from fastapi import BackgroundTasks

from tutorhub.services import email_service
from tutorhub.services.events import RequestCreated, StatusChanged, TutorAssigned

logger = logging.getLogger(__name__)


class NotificationDispatcher:

    def __init__(self, background_tasks: Optional[BackgroundTasks] = None):
        self.background_tasks = background_tasks

    def publish(self, event) -> None:
        """Planifie la livraison de l'événement. Ne lève jamais."""
        if self.background_tasks is not None:
            self.background_tasks.add_task(self.deliver, event)
        else:
            self.deliver(event)

    def deliver(self, event) -> bool:
        """
        Envoie les emails associés à l'événement.
        Retourne True si tous les envois ont réussi, False sinon.
        """
        try:
            if isinstance(event, RequestCreated):
                return self._on_request_created(event)
            if isinstance(event, TutorAssigned):
                return self._on_tutor_assigned(event)
            if isinstance(event, StatusChanged):
                return self._on_status_changed(event)
            logger.warning("Événement sans gestionnaire : %r", event)
            return False
        except Exception:
            logger.error("Échec de notification pour %s", type(event).__name__, exc_info=True)
            return False

    def _on_request_created(self, event: RequestCreated) -> bool:
        confirmed = email_service.send_request_created_email(
            student_email=event.student_email,
            student_name=event.student_name,
            subject=event.subject,
            grade_level=event.grade_level,
            request_id=event.request_id,
        )
        broadcast = email_service.send_admin_new_request_email(
            recipients=event.staff_emails,
            subject=event.subject,
            grade_level=event.grade_level,
            student_name=event.student_name,
            description=event.description,
            request_id=event.request_id,
        )
        return confirmed and broadcast

    def _on_tutor_assigned(self, event: TutorAssigned) -> bool:
        return email_service.send_tutor_assigned_email(
            student_email=event.student_email,
            student_name=event.student_name,
            tutor_name=event.tutor_name,
            subject=event.subject,
            request_id=event.request_id,
        )

    def _on_status_changed(self, event: StatusChanged) -> bool:
        return email_service.send_status_changed_email(
            student_email=event.student_email,
            student_name=event.student_name,
            new_status=event.new_status,
            subject=event.subject,
            request_id=event.request_id,
        )


def get_dispatcher(background_tasks: BackgroundTasks) -> NotificationDispatcher:
    """Dépendance FastAPI : dispatcher lié aux tâches de fond de la requête courante."""
    return NotificationDispatcher(background_tasks)
