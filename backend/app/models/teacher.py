"""
Modèle SQLAlchemy pour les enseignants.
last_sync est mis à jour à chaque synchronisation offline réussie.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from app.database import Base


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(String(50), unique=True, nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    device_id = Column(String(100), nullable=True)   # Appareil utilisé pour la saisie offline
    active = Column(Boolean, default=True)
    last_sync = Column(DateTime(timezone=True), nullable=True)
    institute_id = Column(Integer, ForeignKey("institutes.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
