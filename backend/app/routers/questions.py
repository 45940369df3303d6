"""
Router pour le tableau de questions/réponses.
Les étudiants posent des questions dans leur séance et y réagissent
("like", "helpful") ; les administrateurs répondent.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.auth.dependencies import check_session_access, get_current_user, require_admin, visible_session_filter
from app.database import get_db
from app.models.question import Question
from app.models.user import User
from app.schemas.question import AnswerCreate, InteractionToggleResult, QuestionCreate, QuestionResponse
from app.services import question_service

router = APIRouter(prefix="/api/v1/questions", tags=["Questions"])


@router.get("", response_model=List[QuestionResponse], summary="Lister les questions")
def list_questions(
    session_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Questions avec leurs compteurs de réactions, les plus récentes d'abord.
    Un étudiant ne voit que celles de sa séance.
    """
    try:
        session_filter = visible_session_filter(db, current_user, session_id)
    except LookupError:
        return []
    return question_service.get_questions(db, session_filter, viewer_id=current_user.id)


@router.post("", response_model=QuestionResponse, status_code=201, summary="Poser une question")
def create_question(
    data: QuestionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    check_session_access(db, current_user, data.session_id)
    try:
        return question_service.create_question(db, data, current_user)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{question_id}/answer", response_model=QuestionResponse, summary="Répondre à une question")
def answer_question(
    question_id: uuid.UUID,
    data: AnswerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Attache la réponse à la question. Une nouvelle réponse remplace la précédente."""
    result = question_service.answer_question(db, question_id, data.answer, current_user)
    if result is None:
        raise HTTPException(status_code=404, detail="Question introuvable.")
    return result


@router.post(
    "/{question_id}/interactions/{interaction_type}",
    response_model=InteractionToggleResult,
    summary="Ajouter / retirer une réaction",
)
def toggle_interaction(
    question_id: uuid.UUID,
    interaction_type: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Bascule la réaction ("like" ou "helpful") de l'utilisateur sur la question.
    Retourne 404 si la question est introuvable, 400 si le type est inconnu.
    """
    question = db.get(Question, question_id)
    if question is None:
        raise HTTPException(status_code=404, detail="Question introuvable.")
    check_session_access(db, current_user, question.session_id)

    try:
        return question_service.toggle_interaction(db, question_id, current_user, interaction_type)
    except ValueError as e:
        msg = str(e)
        if "introuvable" in msg:
            raise HTTPException(status_code=404, detail=msg)
        raise HTTPException(status_code=400, detail=msg)
