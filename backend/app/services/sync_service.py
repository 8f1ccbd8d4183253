"""
Service de synchronisation offline → online des présences.

Stratégie : réconciliation par entrée, dans une seule transaction pour tout le batch.
Pour chaque entrée, dans l'ordre reçu :
1. Champs obligatoires (offlineId, studentId, courseId, date, status) → sinon MissingFields
2. Élève actif + inscrit au cours de l'enseignant → sinon InvalidAssociation
3. offlineId déjà connu → la saisie a déjà été synchronisée : mise à jour (le client
   a pu corriger l'entrée depuis), comptée « updated », jamais d'erreur
4. Présence existante pour (élève, cours, date, enseignant) sous un autre identifiant
   ou saisie en direct → mise à jour, l'offlineId reçu devient celui de la présence
5. Sinon → création

Isolation : chaque entrée s'exécute dans un SAVEPOINT. Une erreur métier ou une
erreur d'écriture sur une entrée est consignée dans le rapport et n'interrompt pas
les suivantes. Seule une erreur d'infrastructure (base injoignable) annule tout le
batch (StoreUnavailable).

Deux entrées du même batch sur le même triplet : la seconde met à jour ce que la
première vient d'écrire (dernière du batch gagnante).
"""

import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy.orm import Session

from app.database import is_infrastructure_error, transaction_scope
from app.exceptions import AttendanceError, EmptyBatch, MissingFields, OfflineIdConflict
from app.models.teacher import Teacher
from app.schemas.sync import SyncEntry, SyncResponse, SyncStatus
from app.services import attendance_service, enrollment_service

logger = logging.getLogger(__name__)


def sync_attendances(db: Session, entries: List[SyncEntry], teacher: Teacher) -> SyncResponse:
    """
    Applique un batch de présences saisies hors-ligne et retourne le rapport complet.

    Lève EmptyBatch si la liste est vide (aucune écriture, last_sync inchangé)
    et StoreUnavailable si la base devient injoignable en cours de batch (rien n'est commité).
    """
    if not entries:
        raise EmptyBatch("Aucune présence à synchroniser.")

    result = SyncResponse(total=len(entries))

    with transaction_scope(db):
        for entry in entries:
            try:
                with db.begin_nested():
                    created = _reconcile_entry(db, entry, teacher)
            except AttendanceError as exc:
                result.add_failure(entry.offline_id, exc.code)
                logger.warning(
                    "Sync enseignant %s : entrée %s rejetée (%s) : %s",
                    teacher.id, entry.offline_id or "unknown", exc.code, exc,
                )
                continue
            except Exception as exc:
                if is_infrastructure_error(exc):
                    raise
                result.add_failure(entry.offline_id, str(exc))
                logger.warning(
                    "Sync enseignant %s : entrée %s en échec : %s",
                    teacher.id, entry.offline_id or "unknown", exc,
                )
                continue

            if created:
                result.created += 1
            else:
                result.updated += 1

        teacher.last_sync = datetime.now(timezone.utc)

    logger.info(
        "Sync enseignant %s : %d reçues, %d créées, %d mises à jour, %d en échec",
        teacher.id, result.total, result.created, result.updated, result.failed,
    )
    return result


def _reconcile_entry(db: Session, entry: SyncEntry, teacher: Teacher) -> bool:
    """Applique une entrée. Retourne True si une présence a été créée, False si mise à jour."""
    missing = entry.missing_fields()
    if missing:
        raise MissingFields(f"Champs obligatoires manquants : {', '.join(missing)}.")

    enrollment_service.validate_association(db, entry.student_id, entry.course_id, teacher.id)

    # Déjà synchronisée lors d'un appel précédent (retry client, batch renvoyé)
    already_synced = attendance_service.find_by_offline_id(db, entry.offline_id)
    if already_synced is not None:
        if already_synced.teacher_id != teacher.id:
            raise OfflineIdConflict(
                f"offlineId {entry.offline_id} déjà utilisé par un autre enseignant."
            )
        attendance_service.update_attendance(db, already_synced, entry)
        return False

    # Même observation déjà présente (autre offlineId ou saisie directe)
    existing = attendance_service.find_by_natural_key(
        db, entry.student_id, entry.course_id, entry.date, teacher.id
    )
    if existing is not None:
        attendance_service.update_attendance(db, existing, entry, entry.offline_id)
        return False

    _, created = attendance_service.insert_attendance(db, entry, teacher, entry.offline_id)
    return created


def get_sync_status(teacher: Teacher) -> SyncStatus:
    return SyncStatus(teacher_id=teacher.id, last_sync=teacher.last_sync)
