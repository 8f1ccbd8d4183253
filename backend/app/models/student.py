"""
Modèles SQLAlchemy pour les élèves et leurs inscriptions aux cours.
"""

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint, func,
)

from app.database import Base

ENROLLMENT_STATUSES = ("Active", "Dropped", "Completed")


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    registration_number = Column(String(50), nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(100), nullable=True)
    active = Column(Boolean, default=True)
    institute_id = Column(Integer, ForeignKey("institutes.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class StudentCourse(Base):
    """Association élève ↔ cours. Seules les inscriptions Active autorisent la prise de présence."""
    __tablename__ = "student_courses"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="unique_student_course"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    enrollment_date = Column(Date, server_default=func.current_date())
    status = Column(String(20), default="Active")  # Active, Dropped, Completed
