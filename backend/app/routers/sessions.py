"""
Router pour les séances et les inscriptions.
Création, activation et suppression réservées aux administrateurs ;
un étudiant peut s'inscrire lui-même ou se désinscrire.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user, require_admin
from app.database import get_db
from app.models.user import ROLE_ADMIN, User
from app.schemas.study_session import (
    EnrollRequest,
    MoveRequest,
    SessionCreate,
    SessionResponse,
    SessionUpdate,
    StudentSummary,
)
from app.services import session_service

router = APIRouter(prefix="/api/v1/sessions", tags=["Séances"])


def _to_http_error(e: ValueError, default_status: int = 400) -> HTTPException:
    msg = str(e)
    if "introuvable" in msg:
        return HTTPException(status_code=404, detail=msg)
    return HTTPException(status_code=default_status, detail=msg)


@router.get("", response_model=List[SessionResponse], summary="Lister les séances")
def list_sessions(
    active_only: bool = False,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    """Retourne les séances avec leur nombre d'inscrits, triées par jour puis par heure."""
    return session_service.get_sessions(db, active_only=active_only)


@router.post("", response_model=SessionResponse, status_code=201, summary="Créer une séance")
def create_session(
    data: SessionCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """Crée une séance (jour + heure au format 08h00). L'identifiant est dérivé du jour et de l'heure."""
    try:
        return session_service.create_session(db, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/me", response_model=Optional[SessionResponse], summary="Ma séance")
def my_session(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Retourne la séance de l'utilisateur connecté, ou null s'il n'est inscrit nulle part."""
    return session_service.get_user_session(db, current_user.id)


@router.get("/export", summary="Exporter la liste des inscrits en CSV")
def export_enrollments(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """Exporte les étudiants inscrits par séance en CSV (UTF-8 BOM, séparateur ;)."""
    csv_content = session_service.export_enrollments_csv(db)
    return StreamingResponse(
        iter([csv_content]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=liste_etudiants.csv"},
    )


@router.post("/move", response_model=SessionResponse, summary="Déplacer un étudiant")
def move_student(
    data: MoveRequest,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """
    Déplace un étudiant vers une autre séance.
    Retourne 404 si une séance ou l'inscription d'origine est introuvable,
    409 si la séance de destination est complète ou inactive.
    """
    try:
        return session_service.move_student(db, data)
    except ValueError as e:
        raise _to_http_error(e, default_status=409)


@router.get("/{session_id}", response_model=SessionResponse, summary="Détail d'une séance")
def get_session(
    session_id: str,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    study_session = session_service.get_session(db, session_id)
    if study_session is None:
        raise HTTPException(status_code=404, detail="Séance introuvable.")
    return study_session


@router.put("/{session_id}", response_model=SessionResponse, summary="Modifier une séance")
def update_session(
    session_id: str,
    data: SessionUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    try:
        result = session_service.update_session(db, session_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail="Séance introuvable.")
    return result


@router.post("/{session_id}/toggle", response_model=SessionResponse, summary="Activer / désactiver une séance")
def toggle_session(
    session_id: str,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    result = session_service.toggle_session_status(db, session_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Séance introuvable.")
    return result


@router.delete("/{session_id}", status_code=204, summary="Supprimer une séance")
def delete_session(
    session_id: str,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """Supprime une séance et, en cascade, ses inscriptions, présences, cours et questions."""
    if not session_service.delete_session(db, session_id):
        raise HTTPException(status_code=404, detail="Séance introuvable.")


# --- Inscriptions ---

@router.get("/{session_id}/students", response_model=List[StudentSummary], summary="Étudiants inscrits")
def list_session_students(
    session_id: str,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    if not session_service.session_exists(db, session_id):
        raise HTTPException(status_code=404, detail="Séance introuvable.")
    return session_service.get_session_students(db, session_id)


@router.post("/{session_id}/enroll", response_model=SessionResponse, summary="Inscrire un étudiant")
def enroll(
    session_id: str,
    data: EnrollRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Inscrit un étudiant à une séance (remplace son inscription précédente).
    Sans user_id, l'utilisateur connecté s'inscrit lui-même ; seul un administrateur
    peut inscrire un autre étudiant.

    Retourne 404 si la séance ou l'étudiant est introuvable,
    409 si la séance est complète ou inactive.
    """
    user_id = data.user_id or current_user.id
    if user_id != current_user.id and current_user.role != ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="Vous ne pouvez inscrire que vous-même.")

    try:
        return session_service.enroll(db, session_id, user_id)
    except ValueError as e:
        raise _to_http_error(e, default_status=409)


@router.delete("/{session_id}/students/{user_id}", status_code=204, summary="Retirer un étudiant")
def remove_student(
    session_id: str,
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Retire un étudiant d'une séance. Un étudiant ne peut retirer que sa propre inscription."""
    if user_id != current_user.id and current_user.role != ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="Vous ne pouvez retirer que votre propre inscription.")

    if not session_service.remove_enrollment(db, session_id, user_id):
        raise HTTPException(status_code=404, detail="Inscription introuvable.")
