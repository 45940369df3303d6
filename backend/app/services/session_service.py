"""
Service métier pour les séances et les inscriptions des étudiants.

Règles d'inscription :
- une séance inactive refuse toute inscription
- le nombre d'inscrits ne dépasse jamais max_capacity (vérifié juste avant l'écriture)
- un étudiant n'a qu'une inscription : s'inscrire ailleurs remplace l'ancienne
"""

import csv
import io
import logging
import re
import uuid
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.study_session import Enrollment, StudySession
from app.models.user import ROLE_STUDENT, User
from app.schemas.study_session import (
    MoveRequest,
    SessionCreate,
    SessionResponse,
    SessionUpdate,
    StudentSummary,
)

logger = logging.getLogger(__name__)

WEEKDAYS = ["lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"]


def derive_session_id(day: str, time: str) -> str:
    """
    Identifiant de séance dérivé du jour et de l'heure : ("Lundi", "08h00") → "lundi-08h00".
    Deux jours qui ne diffèrent que par la casse donnent le même identifiant.
    """
    day_slug = re.sub(r"\s+", "-", day.strip().lower())
    return f"{day_slug}-{time.strip()}"


def create_session(db: Session, data: SessionCreate) -> SessionResponse:
    """
    Crée une séance active.
    Lève une ValueError si une séance avec le même identifiant existe déjà.
    """
    session_id = derive_session_id(data.day, data.time)
    if db.get(StudySession, session_id) is not None:
        raise ValueError("Cette séance existe déjà.")

    study_session = StudySession(
        id=session_id,
        day=data.day,
        time=data.time,
        max_capacity=data.max_capacity or settings.DEFAULT_SESSION_CAPACITY,
        is_active=True,
    )
    db.add(study_session)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Cette séance existe déjà.")
    db.refresh(study_session)

    logger.info("Séance créée : %s (capacité %d)", session_id, study_session.max_capacity)
    return _to_response(study_session, 0)


def get_sessions(db: Session, active_only: bool = False) -> list[SessionResponse]:
    """Retourne les séances triées par jour de la semaine puis par heure, avec leur nombre d'inscrits."""
    query = select(StudySession)
    if active_only:
        query = query.where(StudySession.is_active.is_(True))
    sessions = db.execute(query).scalars().all()

    counts = dict(db.execute(
        select(Enrollment.session_id, func.count())
        .group_by(Enrollment.session_id)
    ).all())

    sessions = sorted(sessions, key=lambda s: (_weekday_index(s.day), s.day.lower(), s.time))
    return [_to_response(s, counts.get(s.id, 0)) for s in sessions]


def session_exists(db: Session, session_id: str) -> bool:
    return db.get(StudySession, session_id) is not None


def get_session(db: Session, session_id: str) -> Optional[SessionResponse]:
    """Retourne une séance par son ID, ou None si inexistante."""
    study_session = db.get(StudySession, session_id)
    if study_session is None:
        return None
    return _to_response(study_session, _count_enrollments(db, session_id))


def update_session(db: Session, session_id: str, data: SessionUpdate) -> Optional[SessionResponse]:
    """
    Met à jour la capacité et/ou le statut d'une séance.
    Refuse une capacité inférieure au nombre d'inscrits actuel.
    """
    study_session = db.get(StudySession, session_id)
    if study_session is None:
        return None

    count = _count_enrollments(db, session_id)
    if data.max_capacity is not None and data.max_capacity < count:
        raise ValueError(
            f"Impossible de réduire la capacité à {data.max_capacity} : "
            f"{count} étudiants sont déjà inscrits."
        )

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(study_session, field, value)

    db.commit()
    db.refresh(study_session)
    return _to_response(study_session, count)


def toggle_session_status(db: Session, session_id: str) -> Optional[SessionResponse]:
    """Active ou désactive une séance. Retourne None si introuvable."""
    study_session = db.get(StudySession, session_id)
    if study_session is None:
        return None

    study_session.is_active = not study_session.is_active
    db.commit()
    db.refresh(study_session)

    logger.info("Séance %s : is_active=%s", session_id, study_session.is_active)
    return _to_response(study_session, _count_enrollments(db, session_id))


def delete_session(db: Session, session_id: str) -> bool:
    """
    Supprime une séance. Inscriptions, présences, cours et questions liés
    sont supprimés en cascade.
    Retourne True si supprimée, False si introuvable.
    """
    study_session = db.get(StudySession, session_id)
    if study_session is None:
        return False

    db.delete(study_session)
    db.commit()
    logger.info("Séance supprimée : %s", session_id)
    return True


def enroll(db: Session, session_id: str, user_id: uuid.UUID) -> SessionResponse:
    """
    Inscrit un étudiant à une séance.

    Étapes :
    1. La séance existe et est active
    2. Le nombre d'inscrits (hors cet étudiant) est strictement inférieur à max_capacity
       (la ligne de la séance est verrouillée jusqu'au commit)
    3. Suppression de l'éventuelle inscription existante de l'étudiant
    4. Insertion de la nouvelle inscription

    Les étapes 3 et 4 sont validées dans la même transaction.
    """
    study_session = _get_open_session(db, session_id)
    user = _get_student(db, user_id)

    count = _count_enrollments(db, session_id, exclude_user_id=user.id)
    if count >= study_session.max_capacity:
        raise ValueError("Cette séance est complète.")

    db.execute(delete(Enrollment).where(Enrollment.user_id == user.id))
    db.add(Enrollment(user_id=user.id, session_id=session_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Une autre inscription de cet étudiant est en cours. Veuillez réessayer.")

    logger.info(
        "Étudiant %s inscrit à la séance %s (%d/%d)",
        user.id, session_id, count + 1, study_session.max_capacity,
    )
    return _to_response(study_session, count + 1)


def remove_enrollment(db: Session, session_id: str, user_id: uuid.UUID) -> bool:
    """Désinscrit un étudiant d'une séance. Retourne True si retiré, False si lien inexistant."""
    enrollment = _get_enrollment(db, session_id, user_id)
    if enrollment is None:
        return False

    db.delete(enrollment)
    db.commit()
    logger.info("Étudiant %s retiré de la séance %s", user_id, session_id)
    return True


def move_student(db: Session, data: MoveRequest) -> SessionResponse:
    """
    Déplace un étudiant d'une séance vers une autre.

    Même contrôle que l'inscription sur la séance de destination.
    L'inscription existante est réaffectée en une seule écriture : en cas d'échec,
    l'étudiant reste dans sa séance d'origine.
    """
    target = _get_open_session(db, data.to_session_id)

    enrollment = _get_enrollment(db, data.from_session_id, data.user_id)
    if enrollment is None:
        raise ValueError("Inscription introuvable dans la séance d'origine.")

    count = _count_enrollments(db, data.to_session_id, exclude_user_id=data.user_id)
    if count >= target.max_capacity:
        raise ValueError("Cette séance est complète.")

    enrollment.session_id = data.to_session_id
    db.commit()

    logger.info(
        "Étudiant %s déplacé : %s → %s",
        data.user_id, data.from_session_id, data.to_session_id,
    )
    return _to_response(target, count + 1)


def get_enrolled_session_id(db: Session, user_id: uuid.UUID) -> Optional[str]:
    """Identifiant de la séance de l'étudiant, ou None s'il n'est inscrit nulle part."""
    return db.execute(
        select(Enrollment.session_id).where(Enrollment.user_id == user_id)
    ).scalar()


def get_user_session(db: Session, user_id: uuid.UUID) -> Optional[SessionResponse]:
    """Retourne la séance à laquelle l'étudiant est inscrit, ou None."""
    session_id = get_enrolled_session_id(db, user_id)
    if session_id is None:
        return None
    return get_session(db, session_id)


def get_session_students(db: Session, session_id: str) -> list[StudentSummary]:
    """Étudiants inscrits à une séance, triés par nom puis prénom."""
    users = db.execute(
        select(User)
        .join(Enrollment, Enrollment.user_id == User.id)
        .where(Enrollment.session_id == session_id)
        .order_by(User.last_name, User.first_name)
    ).scalars().all()

    return [
        StudentSummary(
            id=u.id,
            first_name=u.first_name,
            last_name=u.last_name,
            email=u.email,
            session_id=session_id,
        )
        for u in users
    ]


def list_students(db: Session, unassigned_only: bool = False) -> list[StudentSummary]:
    """Tous les étudiants avec leur séance ; unassigned_only ne garde que les non inscrits."""
    query = (
        select(User, Enrollment.session_id)
        .outerjoin(Enrollment, Enrollment.user_id == User.id)
        .where(User.role == ROLE_STUDENT)
        .order_by(User.last_name, User.first_name)
    )
    if unassigned_only:
        query = query.where(Enrollment.id.is_(None))

    return [
        StudentSummary(
            id=u.id,
            first_name=u.first_name,
            last_name=u.last_name,
            email=u.email,
            session_id=session_id,
        )
        for u, session_id in db.execute(query).all()
    ]


def export_enrollments_csv(db: Session) -> str:
    """
    Génère la liste des étudiants inscrits par séance.
    Retourne le contenu CSV sous forme de string (UTF-8 BOM pour Excel).
    """
    rows = db.execute(
        select(StudySession, User)
        .join(Enrollment, Enrollment.session_id == StudySession.id)
        .join(User, User.id == Enrollment.user_id)
        .order_by(StudySession.time, User.last_name, User.first_name)
    ).all()
    rows = sorted(rows, key=lambda r: (_weekday_index(r[0].day), r[0].day.lower()))

    output = io.StringIO()
    writer = csv.writer(output, delimiter=";")
    writer.writerow(["Jour", "Heure", "Prénom", "Nom", "Email"])
    for study_session, user in rows:
        writer.writerow([
            study_session.day,
            study_session.time,
            user.first_name,
            user.last_name,
            user.email,
        ])

    return "\ufeff" + output.getvalue()  # BOM pour compatibilité Excel


def _get_open_session(db: Session, session_id: str) -> StudySession:
    """
    Charge la séance en verrouillant sa ligne (SELECT ... FOR UPDATE) jusqu'au commit :
    les inscriptions concurrentes vers une même séance passent l'une après l'autre.
    """
    study_session = db.get(StudySession, session_id, with_for_update=True)
    if study_session is None:
        raise ValueError("Séance introuvable.")
    if not study_session.is_active:
        raise ValueError("Cette séance n'est pas active.")
    return study_session


def _get_student(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise ValueError("Étudiant introuvable.")
    if user.role != ROLE_STUDENT:
        raise ValueError("Seuls les étudiants peuvent être inscrits à une séance.")
    return user


def _get_enrollment(db: Session, session_id: str, user_id: uuid.UUID) -> Optional[Enrollment]:
    return db.execute(
        select(Enrollment).where(
            Enrollment.session_id == session_id,
            Enrollment.user_id == user_id,
        )
    ).scalar()


def _count_enrollments(
    db: Session,
    session_id: str,
    exclude_user_id: Optional[uuid.UUID] = None,
) -> int:
    query = (
        select(func.count())
        .select_from(Enrollment)
        .where(Enrollment.session_id == session_id)
    )
    if exclude_user_id is not None:
        query = query.where(Enrollment.user_id != exclude_user_id)
    return db.execute(query).scalar() or 0


def _weekday_index(day: str) -> int:
    try:
        return WEEKDAYS.index(day.strip().lower())
    except ValueError:
        return len(WEEKDAYS)


def _to_response(study_session: StudySession, enrollment_count: int) -> SessionResponse:
    """Construit le schéma de réponse avec le nom affiché et le nombre d'inscrits."""
    return SessionResponse(
        id=study_session.id,
        day=study_session.day,
        time=study_session.time,
        name=f"{study_session.day} - {study_session.time}",
        description=f"Séance du {study_session.day} à {study_session.time}",
        max_capacity=study_session.max_capacity,
        is_active=study_session.is_active,
        enrollment_count=enrollment_count,
        created_at=study_session.created_at,
    )
