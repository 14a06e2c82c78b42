"""
Configuration partagée pour tous les tests.
Base SQLite en mémoire recréée à chaque test, get_db surchargé, SMTP toujours mocké.
"""

import os

# Avant tout import de tutorhub : le moteur est créé à l'import de tutorhub.database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import itertools
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tutorhub.database import Base, get_db
from tutorhub.main import app
from tutorhub.models.user import User
from tutorhub.security import create_access_token
from tutorhub.services.notification_service import NotificationDispatcher, get_dispatcher

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_counter = itertools.count(1)


class RecordingDispatcher(NotificationDispatcher):
    """Dispatcher de test : mémorise les événements publiés sans rien envoyer."""

    def __init__(self):
        super().__init__()
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture(autouse=True)
def smtp_mock():
    """Aucun test n'ouvre de connexion SMTP réelle."""
    with patch("tutorhub.services.email_service.smtplib.SMTP") as mock_smtp:
        yield mock_smtp


@pytest.fixture
def db():
    """Session sur une base vierge."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db):
    def _make_user(role: str = "student", name: str = None, email: str = None) -> User:
        n = next(_counter)
        user = User(
            name=name or f"{role.capitalize()} {n}",
            email=email or f"{role}{n}@example.com",
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def student(make_user):
    return make_user("student", name="Alice Martin")


@pytest.fixture
def other_student(make_user):
    return make_user("student", name="Bob Durand")


@pytest.fixture
def tutor(make_user):
    return make_user("tutor", name="Claire Petit")


@pytest.fixture
def admin(make_user):
    return make_user("admin", name="Admin Root")


@pytest.fixture
def recorder():
    """Dispatcher enregistreur, branché aussi sur l'API."""
    dispatcher = RecordingDispatcher()
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield dispatcher
    app.dependency_overrides.pop(get_dispatcher, None)


@pytest.fixture
def client(db):
    """Client HTTP de test branché sur la base SQLite en mémoire."""
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.pop(get_db, None)
