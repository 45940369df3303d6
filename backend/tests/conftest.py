"""
Configuration partagée pour tous les tests.
Override la dépendance get_db pour éviter toute connexion réelle à PostgreSQL,
et get_current_user pour simuler un administrateur ou un étudiant connecté.
"""

import uuid
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.auth.dependencies import get_current_user
from app.database import get_db
from app.main import app
from app.models.user import ROLE_ADMIN, ROLE_STUDENT, User


def make_user(role=ROLE_STUDENT, **kwargs) -> User:
    u = MagicMock(spec=User)
    u.id = kwargs.get("id", uuid.uuid4())
    u.first_name = kwargs.get("first_name", "Jean")
    u.last_name = kwargs.get("last_name", "Dupont")
    u.email = kwargs.get("email", "jean.dupont@ecole.be")
    u.role = role
    u.password_hash = kwargs.get("password_hash", "")
    u.created_at = kwargs.get("created_at", datetime.now())
    u.full_name = f"{u.first_name} {u.last_name}"
    return u


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def admin_user():
    return make_user(role=ROLE_ADMIN, first_name="Claire", last_name="Martin", email="admin@ecole.be")


@pytest.fixture
def student_user():
    return make_user(role=ROLE_STUDENT)


@pytest.fixture
def client(mock_db, admin_user):
    """Client HTTP de test connecté en administrateur, avec la BDD mockée."""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: admin_user
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def student_client(mock_db, student_user):
    """Client HTTP de test connecté en étudiant, avec la BDD mockée."""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: student_user
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client(mock_db):
    """Client HTTP de test sans utilisateur simulé (authentification réelle par jeton)."""
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
