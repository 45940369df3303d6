"""
Router pour la consultation des étudiants (administrateurs).
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.study_session import StudentSummary
from app.services import session_service

router = APIRouter(prefix="/api/v1/users", tags=["Utilisateurs"])


@router.get("/students", response_model=List[StudentSummary], summary="Lister les étudiants")
def list_students(
    unassigned_only: bool = False,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """Retourne tous les étudiants avec leur séance ; `unassigned_only` ne garde que les non inscrits."""
    return session_service.list_students(db, unassigned_only=unassigned_only)
