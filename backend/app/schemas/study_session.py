"""
Schémas Pydantic pour les séances et les inscriptions.
"""

import re
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ValidationInfo, field_validator

TIME_PATTERN = re.compile(r"^\d{2}h\d{2}$")


class SessionCreate(BaseModel):
    day: str
    time: str
    max_capacity: Optional[int] = None  # défaut : settings.DEFAULT_SESSION_CAPACITY

    @field_validator("day")
    @classmethod
    def day_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le jour de la séance ne peut pas être vide.")
        return v.strip()

    @field_validator("time")
    @classmethod
    def valid_time(cls, v: str) -> str:
        v = v.strip()
        if not TIME_PATTERN.match(v):
            raise ValueError("Format d'heure invalide. Utilisez le format: 08h00, 10h00, etc.")
        return v

    @field_validator("max_capacity")
    @classmethod
    def positive_capacity(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("La capacité doit être d'au moins 1 étudiant.")
        return v


class SessionUpdate(BaseModel):
    max_capacity: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator("max_capacity")
    @classmethod
    def positive_capacity(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("La capacité doit être d'au moins 1 étudiant.")
        return v


class SessionResponse(BaseModel):
    id: str
    day: str
    time: str
    name: str
    description: str
    max_capacity: int
    is_active: bool
    enrollment_count: int
    created_at: Optional[datetime] = None


class EnrollRequest(BaseModel):
    """Inscription à une séance. Sans user_id, l'utilisateur connecté s'inscrit lui-même."""
    user_id: Optional[uuid.UUID] = None


class MoveRequest(BaseModel):
    """Déplacement d'un étudiant d'une séance vers une autre."""
    user_id: uuid.UUID
    from_session_id: str
    to_session_id: str

    @field_validator("to_session_id")
    @classmethod
    def different_sessions(cls, v: str, info: ValidationInfo) -> str:
        if v == info.data.get("from_session_id"):
            raise ValueError("La séance de destination doit être différente de la séance d'origine.")
        return v


class StudentSummary(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    session_id: Optional[str] = None

    model_config = {"from_attributes": True}
