"""
Dépendances FastAPI d'authentification : utilisateur courant et garde administrateur.
"""

import uuid
from typing import Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.auth import jwt_handler
from app.database import get_db
from app.models.user import ROLE_ADMIN, User
from app.services import session_service

security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    try:
        payload = jwt_handler.decode_access_token(credentials.credentials)
        user_id = uuid.UUID(payload.get("sub", ""))
    except (jwt.PyJWTError, ValueError) as exc:
        raise HTTPException(status_code=401, detail="Jeton invalide ou expiré.") from exc

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Utilisateur introuvable.")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Réserve la route aux administrateurs."""
    if user.role != ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="Accès réservé aux administrateurs.")
    return user


def check_session_access(db: Session, user: User, session_id: str) -> None:
    """Un étudiant n'accède qu'aux contenus de la séance où il est inscrit."""
    if user.role == ROLE_ADMIN:
        return
    if session_service.get_enrolled_session_id(db, user.id) != session_id:
        raise HTTPException(status_code=403, detail="Vous n'êtes pas inscrit à cette séance.")


def visible_session_filter(db: Session, user: User, session_id: Optional[str]) -> Optional[str]:
    """
    Filtre de séance à appliquer pour lister cours ou questions.
    Admin : le filtre demandé (None = toutes les séances).
    Étudiant : sa propre séance ; une autre séance est refusée (403).
    Lève LookupError si l'étudiant n'est inscrit nulle part.
    """
    if user.role == ROLE_ADMIN:
        return session_id

    own_session_id = session_service.get_enrolled_session_id(db, user.id)
    if session_id is not None and session_id != own_session_id:
        raise HTTPException(status_code=403, detail="Vous n'êtes pas inscrit à cette séance.")
    if own_session_id is None:
        raise LookupError("Aucune séance")
    return own_session_id
