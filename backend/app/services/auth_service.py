"""
Service d'authentification : inscription des étudiants, connexion, compte admin initial.

Les mots de passe sont stockés uniquement sous forme de hash salé (werkzeug).
Aucune comparaison en clair n'est effectuée.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from app.auth.jwt_handler import create_access_token
from app.models.user import ROLE_ADMIN, ROLE_STUDENT, User
from app.schemas.auth import RegisterRequest, TokenResponse, UserResponse

logger = logging.getLogger(__name__)


def register_student(db: Session, data: RegisterRequest) -> TokenResponse:
    """
    Crée un compte étudiant et retourne un jeton d'accès.
    Lève une ValueError si l'email est déjà utilisé.
    """
    email = data.email.lower()
    if get_user_by_email(db, email) is not None:
        raise ValueError("Un compte existe déjà avec cet email.")

    user = User(
        first_name=data.first_name,
        last_name=data.last_name,
        email=email,
        password_hash=generate_password_hash(data.password),
        role=ROLE_STUDENT,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Un compte existe déjà avec cet email.")
    db.refresh(user)

    logger.info("Nouvel étudiant inscrit : %s (%s)", user.email, user.id)
    return _issue_token(user)


def authenticate(db: Session, email: str, password: str) -> Optional[TokenResponse]:
    """Retourne un jeton si les identifiants sont valides, None sinon."""
    user = get_user_by_email(db, email.lower())
    if user is None or not check_password_hash(user.password_hash, password):
        logger.warning("Échec de connexion pour %s", email)
        return None
    return _issue_token(user)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(select(User).where(User.email == email)).scalar()


def ensure_admin(db: Session, email: str, password: str) -> bool:
    """
    Crée le compte administrateur s'il n'existe pas encore.
    Un compte existant n'est jamais modifié. Retourne True si un compte a été créé.
    """
    email = email.lower()
    if get_user_by_email(db, email) is not None:
        return False

    db.add(User(
        first_name="Admin",
        last_name="Tutorat",
        email=email,
        password_hash=generate_password_hash(password),
        role=ROLE_ADMIN,
    ))
    db.commit()
    logger.info("Compte administrateur créé : %s", email)
    return True


def _issue_token(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(str(user.id), user.role),
        user=UserResponse.model_validate(user),
    )
