"""
Modèles SQLAlchemy pour les séances (créneaux jour/heure) et les inscriptions.
Nommé study_session pour éviter la confusion avec la session SQLAlchemy.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class StudySession(Base):
    """Créneau récurrent (ex. "Lundi - 08h00") avec une capacité maximale."""
    __tablename__ = "sessions"

    id = Column(String(100), primary_key=True)  # dérivé du jour et de l'heure : "lundi-08h00"
    day = Column(String(50), nullable=False)
    time = Column(String(10), nullable=False)   # format 08h00
    max_capacity = Column(Integer, nullable=False, default=12)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())


class Enrollment(Base):
    """Inscription d'un étudiant à une séance (une seule par étudiant)."""
    __tablename__ = "enrollments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    session_id = Column(String(100), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
