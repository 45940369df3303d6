"""
Modèle SQLAlchemy pour les présences par séance et par date.

Une ligne par (étudiant, séance, date). La sauvegarde d'une feuille de présence
remplace toutes les lignes de la paire (séance, date).
"""

import uuid
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Attendance(Base):
    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("user_id", "session_id", "date", name="uq_attendance_user_session_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    session_id = Column(String(100), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    is_present = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
