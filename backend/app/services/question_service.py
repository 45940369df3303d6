"""
Service métier pour le tableau de questions/réponses.

- une question appartient à une séance
- une seule réponse par question (une nouvelle réponse remplace la précédente)
- réactions "like" / "helpful" en bascule : la présence d'une ligne vaut réaction active
"""

import logging
import uuid
from collections import defaultdict
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.question import (
    INTERACTION_HELPFUL,
    INTERACTION_LIKE,
    INTERACTION_TYPES,
    Question,
    QuestionInteraction,
)
from app.models.study_session import StudySession
from app.models.user import User
from app.schemas.question import InteractionToggleResult, QuestionCreate, QuestionResponse

logger = logging.getLogger(__name__)


def create_question(db: Session, data: QuestionCreate, author: User) -> QuestionResponse:
    """Publie une question dans une séance. Lève ValueError si la séance est introuvable."""
    if db.get(StudySession, data.session_id) is None:
        raise ValueError("Séance introuvable.")

    question = Question(
        title=data.title,
        content=data.content,
        session_id=data.session_id,
        asked_by=author.id,
        asked_by_name=author.full_name,
    )
    db.add(question)
    db.commit()
    db.refresh(question)

    logger.info("Question publiée par %s dans la séance %s", author.id, data.session_id)
    return _to_response(question)


def get_questions(
    db: Session,
    session_id: Optional[str] = None,
    viewer_id: Optional[uuid.UUID] = None,
) -> list[QuestionResponse]:
    """
    Questions du plus récent au plus ancien (filtrées par séance si fournie),
    avec les compteurs de réactions et les réactions de `viewer_id`.
    """
    query = select(Question).order_by(Question.created_at.desc())
    if session_id is not None:
        query = query.where(Question.session_id == session_id)
    questions = db.execute(query).scalars().all()
    if not questions:
        return []

    interactions = db.execute(
        select(QuestionInteraction)
        .where(QuestionInteraction.question_id.in_([q.id for q in questions]))
    ).scalars().all()

    by_question = defaultdict(list)
    for interaction in interactions:
        by_question[interaction.question_id].append(interaction)

    return [_to_response(q, by_question[q.id], viewer_id) for q in questions]


def answer_question(db: Session, question_id: uuid.UUID, answer: str, answerer: User) -> Optional[QuestionResponse]:
    """Attache (ou remplace) la réponse d'une question. Retourne None si introuvable."""
    question = db.get(Question, question_id)
    if question is None:
        return None

    question.answer = answer
    question.answered_by = answerer.id
    question.answered_by_name = answerer.full_name
    question.answered_at = datetime.now()
    db.commit()
    db.refresh(question)

    interactions = db.execute(
        select(QuestionInteraction).where(QuestionInteraction.question_id == question_id)
    ).scalars().all()

    logger.info("Question %s : réponse de %s", question_id, answerer.id)
    return _to_response(question, interactions, answerer.id)


def toggle_interaction(
    db: Session,
    question_id: uuid.UUID,
    user: User,
    interaction_type: str,
) -> InteractionToggleResult:
    """
    Ajoute la réaction si l'utilisateur ne l'a pas encore, la retire sinon.
    Lève ValueError si le type est inconnu ou la question introuvable.

    Si une requête concurrente a déjà inséré la même réaction (contrainte
    uq_interaction_question_user_type), la réaction est considérée comme active.
    """
    if interaction_type not in INTERACTION_TYPES:
        raise ValueError(f"Type de réaction invalide. Valeurs acceptées : {set(INTERACTION_TYPES)}")
    if db.get(Question, question_id) is None:
        raise ValueError("Question introuvable.")

    existing = db.execute(
        select(QuestionInteraction).where(
            QuestionInteraction.question_id == question_id,
            QuestionInteraction.user_id == user.id,
            QuestionInteraction.type == interaction_type,
        )
    ).scalar()

    active = existing is None
    if existing:
        db.delete(existing)
    else:
        db.add(QuestionInteraction(
            question_id=question_id,
            user_id=user.id,
            user_name=user.full_name,
            type=interaction_type,
        ))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Réaction %s déjà enregistrée pour %s sur la question %s", interaction_type, user.id, question_id)
        active = True

    count = db.execute(
        select(func.count())
        .select_from(QuestionInteraction)
        .where(
            QuestionInteraction.question_id == question_id,
            QuestionInteraction.type == interaction_type,
        )
    ).scalar() or 0

    return InteractionToggleResult(
        question_id=question_id,
        type=interaction_type,
        active=active,
        count=count,
    )


def _to_response(
    question: Question,
    interactions: Optional[list[QuestionInteraction]] = None,
    viewer_id: Optional[uuid.UUID] = None,
) -> QuestionResponse:
    """Construit le schéma de réponse avec les compteurs like/helpful."""
    interactions = interactions or []
    return QuestionResponse(
        id=question.id,
        title=question.title,
        content=question.content,
        session_id=question.session_id,
        asked_by=question.asked_by,
        asked_by_name=question.asked_by_name,
        answered_by=question.answered_by,
        answered_by_name=question.answered_by_name,
        answer=question.answer,
        created_at=question.created_at,
        answered_at=question.answered_at,
        like_count=sum(1 for i in interactions if i.type == INTERACTION_LIKE),
        helpful_count=sum(1 for i in interactions if i.type == INTERACTION_HELPFUL),
        my_interactions=sorted({i.type for i in interactions if viewer_id is not None and i.user_id == viewer_id}),
    )
