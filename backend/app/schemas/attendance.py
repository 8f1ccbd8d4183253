"""
Schémas Pydantic pour la prise de présence en direct.
Endpoint : POST /api/v1/attendance

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre le champ `date` et le type `datetime.date` dans Pydantic v2.
"""

import datetime as dt
from typing import Optional

from pydantic import Field, field_validator

from app.schemas.base import CamelModel

VALID_STATUSES = {"Present", "Late", "Absent"}
OFFLINE_ID_MAX_LENGTH = 100                      # Attendance.offline_id : String(100)


def check_status(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in VALID_STATUSES:
        raise ValueError(f"Statut invalide. Valeurs acceptées : {sorted(VALID_STATUSES)}")
    return v


def blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class AttendanceCreate(CamelModel):
    """Présence saisie en direct par l'enseignant (éventuellement portant un offlineId)."""

    student_id: int
    course_id: int
    date: dt.date
    status: str                                  # Present, Late, Absent
    time_in: Optional[dt.time] = None            # HH:MM:SS
    remarks: Optional[str] = None
    fingerprint_verified: Optional[bool] = None
    offline_id: Optional[str] = Field(default=None, max_length=OFFLINE_ID_MAX_LENGTH)

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: str) -> str:
        return check_status(v)

    @field_validator("offline_id")
    @classmethod
    def offline_id_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)


class AttendanceResponse(CamelModel):
    """Réponse minimale attendue par les clients après enregistrement."""

    id: int
    student_id: int
    course_id: int
    date: dt.date
    status: str

    model_config = {"from_attributes": True}


class AttendanceOutcome(CamelModel):
    """Résultat d'un upsert : l'enregistrement et s'il vient d'être créé (201) ou mis à jour (200)."""

    attendance: AttendanceResponse
    created: bool
