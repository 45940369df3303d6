"""
Schémas Pydantic pour les questions, réponses et réactions.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator


class QuestionCreate(BaseModel):
    title: str
    content: str
    session_id: str

    @field_validator("title", "content", "session_id")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Veuillez remplir tous les champs.")
        return v.strip()


class AnswerCreate(BaseModel):
    answer: str

    @field_validator("answer")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("La réponse ne peut pas être vide.")
        return v.strip()


class QuestionResponse(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    session_id: str
    asked_by: uuid.UUID
    asked_by_name: str
    answered_by: Optional[uuid.UUID] = None
    answered_by_name: Optional[str] = None
    answer: Optional[str] = None
    created_at: Optional[datetime] = None
    answered_at: Optional[datetime] = None
    like_count: int = 0
    helpful_count: int = 0
    my_interactions: List[str] = []  # types de réaction actifs pour l'utilisateur courant


class InteractionToggleResult(BaseModel):
    question_id: uuid.UUID
    type: str
    active: bool  # True si la réaction vient d'être ajoutée
    count: int    # nombre total de réactions de ce type sur la question
