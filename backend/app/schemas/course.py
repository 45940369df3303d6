"""
Schémas Pydantic pour les cours.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class CourseCreate(BaseModel):
    title: str
    content: str
    session_id: str

    @field_validator("title", "content", "session_id")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Veuillez remplir tous les champs.")
        return v.strip()


class CourseResponse(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    session_id: str
    created_by: Optional[uuid.UUID]
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
