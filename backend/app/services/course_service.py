"""
Service métier pour les cours : documents texte rattachés à une séance.
Pas de modification : un cours est créé puis éventuellement supprimé.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.course import Course
from app.models.study_session import StudySession
from app.schemas.course import CourseCreate, CourseResponse

logger = logging.getLogger(__name__)


def create_course(db: Session, data: CourseCreate, created_by: uuid.UUID) -> CourseResponse:
    """Crée un cours pour une séance. Lève ValueError si la séance est introuvable."""
    if db.get(StudySession, data.session_id) is None:
        raise ValueError("Séance introuvable.")

    course = Course(
        title=data.title,
        content=data.content,
        session_id=data.session_id,
        created_by=created_by,
    )
    db.add(course)
    db.commit()
    db.refresh(course)

    logger.info("Cours créé : %s (séance %s)", course.title, course.session_id)
    return CourseResponse.model_validate(course)


def get_courses(db: Session, session_id: Optional[str] = None) -> list[CourseResponse]:
    """Cours du plus récent au plus ancien, filtrés par séance si fournie."""
    query = select(Course).order_by(Course.created_at.desc())
    if session_id is not None:
        query = query.where(Course.session_id == session_id)

    courses = db.execute(query).scalars().all()
    return [CourseResponse.model_validate(c) for c in courses]


def get_course(db: Session, course_id: uuid.UUID) -> Optional[Course]:
    return db.get(Course, course_id)


def delete_course(db: Session, course_id: uuid.UUID) -> bool:
    """Supprime un cours. Retourne True si supprimé, False si introuvable."""
    course = db.get(Course, course_id)
    if course is None:
        return False

    db.delete(course)
    db.commit()
    logger.info("Cours supprimé : %s", course_id)
    return True
