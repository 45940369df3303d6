"""
Router d'authentification : inscription étudiant, connexion, utilisateur courant.
La déconnexion se fait côté client en oubliant le jeton.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from app.services import auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentification"])


@router.post("/register", response_model=TokenResponse, status_code=201, summary="Créer un compte étudiant")
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Crée un compte avec le rôle étudiant et retourne un jeton d'accès.
    Aucun compte administrateur ne peut être créé par cette route.
    """
    try:
        return auth_service.register_student(db, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/login", response_model=TokenResponse, summary="Se connecter")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    token = auth_service.authenticate(db, data.email, data.password)
    if token is None:
        raise HTTPException(status_code=401, detail="Email ou mot de passe incorrect.")
    return token


@router.get("/me", response_model=UserResponse, summary="Utilisateur connecté")
def me(current_user: User = Depends(get_current_user)):
    return current_user
