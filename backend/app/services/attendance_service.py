"""
Service métier pour les présences par séance et par date.

Stratégie de sauvegarde : remplacement complet
- toutes les lignes existantes de la paire (séance, date) sont supprimées
- une ligne par étudiant actuellement inscrit est insérée
- suppression et insertion sont validées dans une seule transaction
Sauvegarder deux fois la même paire ne conserve que la dernière feuille.
"""

import csv
import io
import logging
import math
import uuid
from datetime import date
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.models.attendance import Attendance
from app.models.study_session import StudySession
from app.schemas.attendance import (
    AttendanceEntry,
    AttendanceRecord,
    AttendanceSheet,
    AttendanceSheetRow,
    AttendanceSummary,
    UserAttendanceHistory,
)
from app.services.session_service import get_session_students

logger = logging.getLogger(__name__)


def get_attendance_sheet(db: Session, session_id: str, day: date) -> AttendanceSheet:
    """
    Feuille de présence d'une séance pour une date : chaque inscrit avec son statut
    enregistré (absent par défaut).
    Lève ValueError si la séance est introuvable.
    """
    _ensure_session_exists(db, session_id)

    students = get_session_students(db, session_id)
    stored = dict(db.execute(
        select(Attendance.user_id, Attendance.is_present)
        .where(Attendance.session_id == session_id, Attendance.date == day)
    ).all())

    rows = [
        AttendanceSheetRow(
            user_id=s.id,
            first_name=s.first_name,
            last_name=s.last_name,
            email=s.email,
            is_present=stored.get(s.id, False),
        )
        for s in students
    ]
    present_count = sum(1 for r in rows if r.is_present)

    return AttendanceSheet(
        session_id=session_id,
        date=day,
        has_existing=bool(stored),
        present_count=present_count,
        absent_count=len(rows) - present_count,
        students=rows,
    )


def save_attendance(
    db: Session,
    session_id: str,
    day: date,
    entries: List[AttendanceEntry],
) -> AttendanceSheet:
    """
    Enregistre la feuille de présence d'une séance pour une date.

    Les étudiants inscrits absents de `entries` sont marqués absents.
    Les entrées pour des étudiants non inscrits sont ignorées.
    """
    _ensure_session_exists(db, session_id)

    flags = {e.user_id: e.is_present for e in entries}
    students = get_session_students(db, session_id)

    ignored = set(flags) - {s.id for s in students}
    if ignored:
        logger.debug("Présences ignorées (non inscrits à %s) : %s", session_id, ignored)

    db.execute(
        delete(Attendance).where(
            Attendance.session_id == session_id,
            Attendance.date == day,
        )
    )
    db.add_all([
        Attendance(
            user_id=s.id,
            session_id=session_id,
            date=day,
            is_present=flags.get(s.id, False),
        )
        for s in students
    ])
    db.commit()

    present_count = sum(1 for s in students if flags.get(s.id, False))
    logger.info(
        "Présences enregistrées pour la séance %s, %s : %d présents / %d inscrits",
        session_id, day.isoformat(), present_count, len(students),
    )

    return AttendanceSheet(
        session_id=session_id,
        date=day,
        has_existing=True,
        present_count=present_count,
        absent_count=len(students) - present_count,
        students=[
            AttendanceSheetRow(
                user_id=s.id,
                first_name=s.first_name,
                last_name=s.last_name,
                email=s.email,
                is_present=flags.get(s.id, False),
            )
            for s in students
        ],
    )


def get_user_attendances(db: Session, user_id: uuid.UUID) -> UserAttendanceHistory:
    """Historique des présences d'un étudiant, du plus récent au plus ancien, avec son taux."""
    records = db.execute(
        select(Attendance)
        .where(Attendance.user_id == user_id)
        .order_by(Attendance.date.desc())
    ).scalars().all()

    present = sum(1 for r in records if r.is_present)
    return UserAttendanceHistory(
        user_id=user_id,
        summary=AttendanceSummary(
            total=len(records),
            present=present,
            absent=len(records) - present,
            rate=attendance_rate(present, len(records)),
        ),
        records=[AttendanceRecord.model_validate(r) for r in records],
    )


def attendance_rate(present: int, total: int) -> int:
    """Pourcentage de présence arrondi à l'entier le plus proche (0 sans séance)."""
    if total == 0:
        return 0
    return math.floor(present * 100 / total + 0.5)


def export_attendance_csv(db: Session, session_id: str, day: date) -> str:
    """
    Génère le CSV de la feuille de présence (UTF-8 BOM, séparateur ;).
    Lève ValueError si la séance est introuvable.
    """
    sheet = get_attendance_sheet(db, session_id, day)

    output = io.StringIO()
    writer = csv.writer(output, delimiter=";")
    writer.writerow(["Prénom", "Nom", "Email", "Statut"])
    for row in sheet.students:
        writer.writerow([
            row.first_name,
            row.last_name,
            row.email,
            "Présent" if row.is_present else "Absent",
        ])

    return "\ufeff" + output.getvalue()  # BOM pour compatibilité Excel


def _ensure_session_exists(db: Session, session_id: str) -> None:
    if db.get(StudySession, session_id) is None:
        raise ValueError("Séance introuvable.")
