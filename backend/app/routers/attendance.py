"""
Router pour les présences : saisie directe, synchronisation offline et consultation.
Toutes les routes agissent pour l'enseignant identifié par get_current_teacher.
"""

import datetime as dt
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_teacher
from app.exceptions import ConstraintViolation, EmptyBatch, InvalidAssociation, StoreUnavailable
from app.models.teacher import Teacher
from app.schemas.attendance import VALID_STATUSES, AttendanceCreate, AttendanceResponse
from app.schemas.report import AttendancePage, CourseReport, DailySummary
from app.schemas.sync import SyncRequest, SyncResponse, SyncStatus
from app.services import attendance_service, report_service, sync_service

logger = logging.getLogger(__name__)

STORE_UNAVAILABLE_DETAIL = "Base de données indisponible, réessayez plus tard."

router = APIRouter(prefix="/api/v1/attendance", tags=["Présences"])


@router.post(
    "",
    response_model=AttendanceResponse,
    status_code=201,
    summary="Enregistrer une présence",
)
def record_attendance(
    data: AttendanceCreate,
    response: Response,
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
):
    """
    Enregistre la présence d'un élève à un cours pour une date.

    - 201 : nouvelle présence créée
    - 200 : une présence existait déjà pour (élève, cours, date) → mise à jour en place
    - 400 : élève inactif, non inscrit, ou cours d'un autre enseignant
    - 409 : offlineId déjà utilisé par une autre présence
    """
    try:
        outcome = attendance_service.record_attendance(db, data, teacher)
    except InvalidAssociation as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConstraintViolation as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreUnavailable as e:
        logger.error("Base de données indisponible : %s", e)
        raise HTTPException(status_code=500, detail=STORE_UNAVAILABLE_DETAIL)

    if not outcome.created:
        response.status_code = 200
    return outcome.attendance


@router.post(
    "/sync",
    response_model=SyncResponse,
    summary="Synchroniser les présences saisies hors-ligne",
)
def sync_attendances(
    data: SyncRequest,
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
):
    """
    Reçoit un batch de présences saisies hors-ligne et les réconcilie avec la base.

    Comportement :
    - Idempotent : un offlineId déjà synchronisé met à jour sa présence (pas de doublon)
    - Conflit sur (élève, cours, date) : la présence existante est mise à jour et prend l'offlineId reçu
    - Une entrée invalide n'interrompt pas les autres : elle apparaît dans failedRecords
    - Retourne 200 avec le rapport total / created / updated / failed

    400 si le batch est vide, 500 si la base devient indisponible (rien n'est enregistré).
    """
    try:
        return sync_service.sync_attendances(db, data.attendance_records, teacher)
    except EmptyBatch as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreUnavailable as e:
        logger.error("Base de données indisponible : %s", e)
        raise HTTPException(status_code=500, detail=STORE_UNAVAILABLE_DETAIL)


@router.get("/sync/status", response_model=SyncStatus, summary="Dernière synchronisation")
def get_sync_status(teacher: Teacher = Depends(get_current_teacher)):
    return sync_service.get_sync_status(teacher)


@router.get("", response_model=AttendancePage, summary="Lister les présences de l'enseignant")
def list_attendance(
    course_id: Optional[int] = Query(default=None, alias="courseId"),
    student_id: Optional[int] = Query(default=None, alias="studentId"),
    day: Optional[dt.date] = Query(default=None, alias="date"),
    status: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
):
    """Présences paginées, filtrables par cours, élève, date et statut."""
    if status is not None and status not in VALID_STATUSES:
        raise HTTPException(status_code=422, detail="Le statut doit être Present, Late ou Absent.")
    return report_service.list_attendance(
        db, teacher,
        course_id=course_id, student_id=student_id, day=day, status=status,
        page=page, limit=limit,
    )


@router.get("/daily", response_model=DailySummary, summary="Synthèse des présences du jour")
def get_daily_summary(
    day: Optional[dt.date] = Query(default=None, alias="date"),
    course_id: Optional[int] = Query(default=None, alias="courseId"),
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
):
    return report_service.get_daily_summary(db, teacher, day=day, course_id=course_id)


@router.get("/report", response_model=CourseReport, summary="Rapport de présences d'un cours")
def get_course_report(
    course_id: int = Query(alias="courseId"),
    start_date: Optional[dt.date] = Query(default=None, alias="startDate"),
    end_date: Optional[dt.date] = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
):
    """
    Rapport par élève (présent / en retard / absent) sur les dates saisies du cours.
    Retourne 404 si le cours n'appartient pas à l'enseignant.
    """
    try:
        return report_service.get_course_report(db, teacher, course_id, start_date, end_date)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
