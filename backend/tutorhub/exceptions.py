"""
Exceptions métier du cycle de vie des demandes.

Chaque exception porte le code HTTP sous lequel main.py la présente au client.
Les services les lèvent toujours avant toute écriture en base.
"""


class RequestWorkflowError(Exception):
    """Base des erreurs métier exposées au client."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(RequestWorkflowError):
    """Donnée fournie incohérente (ex. tutorId absent ou ne désignant pas un tuteur)."""

    status_code = 400


class AuthorizationError(RequestWorkflowError):
    """Refus du garde d'autorisation. Le message contient le rôle de l'acteur."""

    status_code = 403


class NotFoundError(RequestWorkflowError):
    """Demande ou tuteur introuvable (identifiant mal formé ou absent, sans distinction)."""

    status_code = 404


class ConflictError(RequestWorkflowError):
    """Action incompatible avec le statut courant de la demande."""

    status_code = 409


class NotificationError(Exception):
    """Échec d'envoi d'une notification. Ne remonte jamais jusqu'au client."""
