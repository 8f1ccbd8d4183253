"""
Modèle SQLAlchemy pour les cours.
Un cours appartient à un institut et est dispensé par (au plus) un enseignant.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from app.database import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=False)
    active = Column(Boolean, default=True)
    institute_id = Column(Integer, ForeignKey("institutes.id"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
