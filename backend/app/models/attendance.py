"""
Modèle SQLAlchemy pour les présences (saisie directe ou synchronisée depuis l'offline).

Invariants portés par la base :
- une seule présence par (student_id, course_id, date) → mise à jour en place, jamais de doublon
- offline_id : identifiant généré côté client hors-ligne, unique lorsqu'il est renseigné
- teacher_id / institute_id sont fixés à la création et ne changent plus
"""

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, Time,
    UniqueConstraint, func,
)

from app.database import Base


class Attendance(Base):
    """Présence d'un élève à un cours pour une date donnée (Present, Late, Absent)."""
    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", "date", name="unique_attendance_student_course_date"),
        Index("attendance_date_student_course_idx", "date", "student_id", "course_id"),
        Index("attendance_teacher_date_idx", "teacher_id", "date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    offline_id = Column(String(100), unique=True, nullable=True)  # Clé d'idempotence (offline)

    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False)
    institute_id = Column(Integer, ForeignKey("institutes.id"), nullable=False)

    date = Column(Date, nullable=False)
    status = Column(String(10), nullable=False)             # Present, Late, Absent
    time_in = Column(Time, nullable=True)
    remarks = Column(Text, nullable=True)

    fingerprint_verified = Column(Boolean, default=False)
    verified = Column(Boolean, default=False)
    synced_from_offline = Column(Boolean, default=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
