"""
Identification de l'appelant à partir d'un jeton JWT Bearer.

Le jeton porte l'identifiant de l'utilisateur dans la claim `sub`.
L'émission liée à la connexion (mot de passe, cookies) est gérée par le service
d'authentification ; create_access_token sert aux outils d'administration et aux tests.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from tutorhub.config import settings
from tutorhub.database import get_db
from tutorhub.models.user import User

logger = logging.getLogger(__name__)

# auto_error=False : on renvoie nous-mêmes un 401 explicite si l'en-tête manque
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user_id: uuid.UUID, expires_minutes: Optional[int] = None) -> str:
    """Émet un jeton signé pour l'utilisateur donné."""
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Valide la signature et l'expiration. Lève ValueError si le jeton est inutilisable."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise ValueError("Expired token") from exc
    except jwt.InvalidTokenError as exc:
        raise ValueError("Invalid token") from exc


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Dépendance FastAPI : résout l'acteur authentifié.
    Toute route protégée s'arrête ici avec un 401 avant d'atteindre les services.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_failed = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authorized, token failed",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(credentials.credentials)
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError as exc:
        logger.warning("Jeton refusé : %s", exc)
        raise token_failed

    user = db.get(User, user_id)
    if user is None:
        logger.warning("Jeton valide pour un utilisateur inexistant : %s", user_id)
        raise token_failed
    return user
