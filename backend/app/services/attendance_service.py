"""
Service de prise de présence (saisie directe par l'enseignant).

Règle centrale : une seule présence par (élève, cours, date). Une nouvelle saisie
pour le même triplet met à jour l'enregistrement existant au lieu d'en créer un second.

Fusion des champs à la mise à jour : « dernier non-vide gagnant ». Le statut est
toujours remplacé ; time_in, remarks et fingerprint_verified ne le sont que si la
nouvelle saisie fournit une valeur.

Les primitives ci-dessous (find_*, update_attendance, insert_attendance,
upsert_attendance) sont partagées avec la synchronisation offline (sync_service).
Chaque écriture s'exécute dans un SAVEPOINT : un échec d'écriture n'annule que
cette écriture, pas la transaction englobante.
"""

import logging
from datetime import date
from typing import Optional, Tuple, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import transaction_scope
from app.exceptions import ConstraintViolation
from app.models.attendance import Attendance
from app.models.teacher import Teacher
from app.schemas.attendance import AttendanceCreate, AttendanceOutcome, AttendanceResponse
from app.schemas.sync import SyncEntry
from app.services import enrollment_service

logger = logging.getLogger(__name__)

Submission = Union[AttendanceCreate, SyncEntry]


def merge_field(existing, incoming):
    """
    Fusion « dernier non-vide gagnant ».

    None, "" et False sont considérés comme vides et conservent la valeur existante :
    une vérification d'empreinte déjà acquise n'est jamais effacée par une saisie ultérieure.
    """
    if incoming is None or incoming is False or incoming == "":
        return existing
    return incoming


def find_by_natural_key(
    db: Session,
    student_id: int,
    course_id: int,
    day: date,
    teacher_id: int,
) -> Optional[Attendance]:
    return db.execute(
        select(Attendance).where(
            Attendance.student_id == student_id,
            Attendance.course_id == course_id,
            Attendance.date == day,
            Attendance.teacher_id == teacher_id,
        )
    ).scalar()


def find_by_offline_id(db: Session, offline_id: str) -> Optional[Attendance]:
    return db.execute(
        select(Attendance).where(Attendance.offline_id == offline_id)
    ).scalar()


def apply_submission(record: Attendance, submission: Submission) -> None:
    """Reporte une saisie sur une présence existante (statut remplacé, le reste fusionné)."""
    record.status = submission.status
    record.time_in = merge_field(record.time_in, submission.time_in)
    record.remarks = merge_field(record.remarks, submission.remarks)
    record.fingerprint_verified = merge_field(record.fingerprint_verified, submission.fingerprint_verified)


def stamp_offline(record: Attendance, offline_id: str) -> None:
    record.offline_id = offline_id
    record.synced_from_offline = True


def update_attendance(
    db: Session,
    record: Attendance,
    submission: Submission,
    offline_id: Optional[str] = None,
) -> Attendance:
    """
    Met à jour une présence existante dans un SAVEPOINT.
    Lève ConstraintViolation si l'offlineId fourni est déjà porté par une autre présence.
    """
    try:
        with db.begin_nested():
            apply_submission(record, submission)
            if offline_id is not None:
                stamp_offline(record, offline_id)
    except IntegrityError as exc:
        raise ConstraintViolation(
            f"Mise à jour de la présence {record.id} refusée par une contrainte d'unicité."
        ) from exc
    return record


def insert_attendance(
    db: Session,
    submission: Submission,
    teacher: Teacher,
    offline_id: Optional[str] = None,
) -> Tuple[Attendance, bool]:
    """
    Crée une présence pour l'enseignant. Retourne (présence, créée).

    Si l'INSERT viole l'unicité (élève, cours, date), parce qu'une autre requête vient
    d'insérer le même triplet, on retente une seule fois en mise à jour de la
    ligne gagnante. Sans ligne à mettre à jour, lève ConstraintViolation.
    """
    record = Attendance(
        student_id=submission.student_id,
        course_id=submission.course_id,
        date=submission.date,
        status=submission.status,
        time_in=submission.time_in,
        remarks=submission.remarks,
        fingerprint_verified=bool(submission.fingerprint_verified),
        verified=True,
        synced_from_offline=offline_id is not None,
        offline_id=offline_id,
        teacher_id=teacher.id,
        institute_id=teacher.institute_id,
    )
    try:
        with db.begin_nested():
            db.add(record)
    except IntegrityError as exc:
        existing = find_by_natural_key(
            db, submission.student_id, submission.course_id, submission.date, teacher.id
        )
        if existing is None:
            raise ConstraintViolation(
                f"Présence élève {submission.student_id} / cours {submission.course_id} "
                f"du {submission.date} refusée par une contrainte d'unicité."
            ) from exc
        logger.warning(
            "Insertion concurrente détectée (élève %s, cours %s, %s) → mise à jour de la présence %s",
            submission.student_id, submission.course_id, submission.date, existing.id,
        )
        return update_attendance(db, existing, submission, offline_id), False
    return record, True


def upsert_attendance(
    db: Session,
    submission: Submission,
    teacher: Teacher,
    offline_id: Optional[str] = None,
) -> Tuple[Attendance, bool]:
    """Mise à jour si le triplet (élève, cours, date) existe déjà pour l'enseignant, création sinon."""
    existing = find_by_natural_key(
        db, submission.student_id, submission.course_id, submission.date, teacher.id
    )
    if existing is not None:
        return update_attendance(db, existing, submission, offline_id), False
    return insert_attendance(db, submission, teacher, offline_id)


def record_attendance(db: Session, data: AttendanceCreate, teacher: Teacher) -> AttendanceOutcome:
    """
    Enregistre une présence saisie en direct.

    1. Vérifie que l'élève est actif, inscrit au cours, et que le cours appartient à l'enseignant
    2. Upsert sur (élève, cours, date, enseignant)

    Lève InvalidAssociation (étape 1) ou ConstraintViolation (offlineId déjà utilisé).
    Aucune vérification globale de l'offlineId ici : seule la synchronisation batch
    effectue la réconciliation complète.
    """
    with transaction_scope(db):
        enrollment_service.validate_association(db, data.student_id, data.course_id, teacher.id)
        record, created = upsert_attendance(db, data, teacher, data.offline_id)
        response = AttendanceResponse.model_validate(record)

    logger.info(
        "Présence %s (%s) : élève %s, cours %s, %s → %s",
        response.id, "créée" if created else "mise à jour",
        data.student_id, data.course_id, data.date, data.status,
    )
    return AttendanceOutcome(attendance=response, created=created)
