"""
Schémas Pydantic pour les feuilles de présence.

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre le champ `date` et le type `datetime.date` dans Pydantic v2.
"""

import uuid
import datetime as dt
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class AttendanceEntry(BaseModel):
    user_id: uuid.UUID
    is_present: bool = False


class AttendanceSave(BaseModel):
    """Feuille complète pour une séance et une date : remplace l'existant."""
    date: dt.date
    entries: List[AttendanceEntry] = []


class AttendanceSheetRow(BaseModel):
    user_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    is_present: bool


class AttendanceSheet(BaseModel):
    session_id: str
    date: dt.date
    has_existing: bool
    present_count: int
    absent_count: int
    students: List[AttendanceSheetRow]


class AttendanceRecord(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    session_id: str
    date: dt.date
    is_present: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AttendanceSummary(BaseModel):
    total: int
    present: int
    absent: int
    rate: int  # pourcentage arrondi


class UserAttendanceHistory(BaseModel):
    user_id: uuid.UUID
    summary: AttendanceSummary
    records: List[AttendanceRecord]
