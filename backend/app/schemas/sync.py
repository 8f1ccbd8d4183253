"""
Schémas Pydantic pour la synchronisation offline → online.
Endpoint : POST /api/v1/attendance/sync

Les champs obligatoires d'une entrée sont typés mais optionnels au niveau du schéma :
une entrée incomplète ne rejette pas tout le batch, elle est comptée en échec
(MissingFields) par le service. Un champ mal typé est en revanche refusé (422).
"""

import datetime as dt
from typing import List, Optional

from pydantic import Field, field_validator

from app.config import settings
from app.schemas.attendance import OFFLINE_ID_MAX_LENGTH, blank_to_none, check_status
from app.schemas.base import CamelModel

REQUIRED_ENTRY_FIELDS = ("offline_id", "student_id", "course_id", "date", "status")


class SyncEntry(CamelModel):
    """Une présence saisie hors-ligne sur l'appareil de l'enseignant."""

    offline_id: Optional[str] = Field(default=None, max_length=OFFLINE_ID_MAX_LENGTH)  # Clé d'idempotence générée par le client
    student_id: Optional[int] = None
    course_id: Optional[int] = None
    date: Optional[dt.date] = None
    status: Optional[str] = None
    time_in: Optional[dt.time] = None
    remarks: Optional[str] = None
    fingerprint_verified: Optional[bool] = None

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: Optional[str]) -> Optional[str]:
        return check_status(v)

    @field_validator("offline_id")
    @classmethod
    def offline_id_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)

    def missing_fields(self) -> List[str]:
        return [name for name in REQUIRED_ENTRY_FIELDS if getattr(self, name) is None]


class SyncRequest(CamelModel):
    """Corps de la requête batch de synchronisation."""

    attendance_records: List[SyncEntry]

    @field_validator("attendance_records")
    @classmethod
    def records_not_too_large(cls, v: List[SyncEntry]) -> List[SyncEntry]:
        if len(v) > settings.MAX_SYNC_BATCH_SIZE:
            raise ValueError(
                f"Batch trop grand : maximum {settings.MAX_SYNC_BATCH_SIZE} présences par requête."
            )
        return v


class FailedRecord(CamelModel):
    offline_id: str
    error: str


class SyncResponse(CamelModel):
    """Rapport de synchronisation retourné au client (non persisté)."""

    total: int
    created: int = 0
    updated: int = 0
    failed: int = 0
    failed_records: List[FailedRecord] = []

    def add_failure(self, offline_id: Optional[str], error: str) -> None:
        self.failed += 1
        self.failed_records.append(FailedRecord(offline_id=offline_id or "unknown", error=error))


class SyncStatus(CamelModel):
    teacher_id: int
    last_sync: Optional[dt.datetime]
