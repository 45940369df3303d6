"""
Router pour les présences.
Feuilles de présence par séance et par date (administrateurs),
historique et taux de présence (étudiant connecté).
"""

import datetime as dt
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user, require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.attendance import AttendanceSave, AttendanceSheet, UserAttendanceHistory
from app.services import attendance_service

router = APIRouter(prefix="/api/v1/attendances", tags=["Présences"])


@router.get("/me", response_model=UserAttendanceHistory, summary="Mes présences")
def my_attendances(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Historique des présences de l'utilisateur connecté avec son taux de présence."""
    return attendance_service.get_user_attendances(db, current_user.id)


@router.get("/users/{user_id}", response_model=UserAttendanceHistory, summary="Présences d'un étudiant")
def user_attendances(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    return attendance_service.get_user_attendances(db, user_id)


@router.get("/sessions/{session_id}", response_model=AttendanceSheet, summary="Feuille de présence")
def get_sheet(
    session_id: str,
    date: Optional[dt.date] = None,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """Feuille de présence d'une séance pour une date (aujourd'hui par défaut)."""
    try:
        return attendance_service.get_attendance_sheet(db, session_id, date or dt.date.today())
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/sessions/{session_id}", response_model=AttendanceSheet, summary="Enregistrer les présences")
def save_sheet(
    session_id: str,
    data: AttendanceSave,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """
    Enregistre la feuille de présence d'une séance pour une date.
    Remplace intégralement les présences déjà saisies pour cette date.
    Les inscrits non mentionnés sont marqués absents.
    """
    try:
        return attendance_service.save_attendance(db, session_id, data.date, data.entries)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/sessions/{session_id}/export", summary="Exporter la feuille de présence en CSV")
def export_sheet(
    session_id: str,
    date: Optional[dt.date] = None,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    day = date or dt.date.today()
    try:
        csv_content = attendance_service.export_attendance_csv(db, session_id, day)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return StreamingResponse(
        iter([csv_content]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename=presence_{session_id}_{day.isoformat()}.csv"},
    )
