"""
Vérifications d'inscription utilisées avant toute écriture de présence.

Aucune mise en cache : chaque appel réinterroge la base, le même enseignant
pouvant synchroniser depuis plusieurs appareils en parallèle.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import InvalidAssociation
from app.models.course import Course
from app.models.student import Student, StudentCourse


def is_student_active(db: Session, student_id: int) -> bool:
    student_id = db.execute(
        select(Student.id).where(Student.id == student_id, Student.active.is_(True))
    ).scalar()
    return student_id is not None


def is_enrolled(db: Session, student_id: int, course_id: int, teacher_id: int) -> bool:
    """Vrai si l'élève a une inscription Active à ce cours et que le cours est dispensé par l'enseignant."""
    enrollment_id = db.execute(
        select(StudentCourse.id)
        .join(Course, Course.id == StudentCourse.course_id)
        .where(
            StudentCourse.student_id == student_id,
            StudentCourse.course_id == course_id,
            StudentCourse.status == "Active",
            Course.teacher_id == teacher_id,
        )
        .limit(1)
    ).scalar()
    return enrollment_id is not None


def validate_association(db: Session, student_id: int, course_id: int, teacher_id: int) -> None:
    """Lève InvalidAssociation si le triplet élève / cours / enseignant n'est pas valide."""
    if not is_student_active(db, student_id) or not is_enrolled(db, student_id, course_id, teacher_id):
        raise InvalidAssociation(
            f"Élève {student_id} ou cours {course_id} invalide pour l'enseignant {teacher_id}."
        )
