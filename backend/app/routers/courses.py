"""
Router pour les cours.
Les administrateurs publient et suppriment ; les étudiants consultent
et téléchargent les cours de leur séance.
"""

import uuid
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from app.auth.dependencies import check_session_access, get_current_user, require_admin, visible_session_filter
from app.database import get_db
from app.models.user import User
from app.schemas.course import CourseCreate, CourseResponse
from app.services import course_service

router = APIRouter(prefix="/api/v1/courses", tags=["Cours"])


@router.get("", response_model=List[CourseResponse], summary="Lister les cours")
def list_courses(
    session_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Administrateur : tous les cours, ou ceux d'une séance.
    Étudiant : uniquement les cours de sa séance (liste vide s'il n'est inscrit nulle part).
    """
    try:
        session_filter = visible_session_filter(db, current_user, session_id)
    except LookupError:
        return []
    return course_service.get_courses(db, session_filter)


@router.post("", response_model=CourseResponse, status_code=201, summary="Publier un cours")
def create_course(
    data: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    try:
        return course_service.create_course(db, data, current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{course_id}/download", response_class=PlainTextResponse, summary="Télécharger un cours")
def download_course(
    course_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Retourne le contenu du cours en texte brut, en pièce jointe nommée d'après son titre."""
    course = course_service.get_course(db, course_id)
    if course is None:
        raise HTTPException(status_code=404, detail="Cours introuvable.")
    check_session_access(db, current_user, course.session_id)

    filename = quote(f"{course.title}.txt")
    return PlainTextResponse(
        course.content,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{filename}"},
    )


@router.delete("/{course_id}", status_code=204, summary="Supprimer un cours")
def delete_course(
    course_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    if not course_service.delete_course(db, course_id):
        raise HTTPException(status_code=404, detail="Cours introuvable.")
