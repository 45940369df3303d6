"""
Modèles SQLAlchemy pour le tableau de questions/réponses.
Une seule réponse par question, pas de fil de discussion.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base

INTERACTION_LIKE = "like"
INTERACTION_HELPFUL = "helpful"
INTERACTION_TYPES = (INTERACTION_LIKE, INTERACTION_HELPFUL)


class Question(Base):
    __tablename__ = "questions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    session_id = Column(String(100), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)

    asked_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    asked_by_name = Column(String(255), nullable=False)

    answered_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    answered_by_name = Column(String(255), nullable=True)
    answer = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    answered_at = Column(DateTime, nullable=True)


class QuestionInteraction(Base):
    """Réaction d'un utilisateur sur une question : présence de la ligne = réaction active."""
    __tablename__ = "question_interactions"
    __table_args__ = (
        UniqueConstraint("question_id", "user_id", "type", name="uq_interaction_question_user_type"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    question_id = Column(UUID(as_uuid=True), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    user_name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False)  # like, helpful
    created_at = Column(DateTime, server_default=func.now())
