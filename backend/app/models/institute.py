"""
Modèle SQLAlchemy pour les instituts (locataires).
Version minimale : la gestion des instituts est assurée par le back-office.
"""

from sqlalchemy import Column, DateTime, Integer, String, func

from app.database import Base


class Institute(Base):
    __tablename__ = "institutes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
