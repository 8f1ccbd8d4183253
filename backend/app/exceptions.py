"""
Erreurs métier du noyau présences / synchronisation offline.

Les erreurs métier héritent de ValueError : les routers les traduisent en
HTTPException comme les autres erreurs de validation. `code` est la valeur
renvoyée au client dans failedRecords[].error lors d'une synchronisation.
"""


class AttendanceError(ValueError):
    code = "AttendanceError"


class InvalidAssociation(AttendanceError):
    """L'élève n'est pas actif, pas inscrit au cours, ou le cours n'appartient pas à l'enseignant."""
    code = "InvalidAssociation"


class MissingFields(AttendanceError):
    """Entrée de batch incomplète (offlineId, studentId, courseId, date ou status absent)."""
    code = "MissingFields"


class ConstraintViolation(AttendanceError):
    """Violation d'unicité en base (insertion concurrente) non récupérable par une mise à jour."""
    code = "ConstraintViolation"


class OfflineIdConflict(AttendanceError):
    """L'offlineId reçu est déjà porté par une présence d'un autre enseignant."""
    code = "OfflineIdConflict"


class EmptyBatch(AttendanceError):
    code = "EmptyBatch"


class StoreUnavailable(RuntimeError):
    """Base de données injoignable : la transaction entière est annulée."""
    code = "StoreUnavailable"
