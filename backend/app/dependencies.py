"""
Dépendances FastAPI partagées par les routers.

L'authentification n'est pas gérée par ce service : l'enseignant appelant est
identifié par l'en-tête X-Teacher-Id, posé par la passerelle d'authentification.
Brancher une vraie authentification revient à remplacer get_current_teacher.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.teacher import Teacher


def get_current_teacher(
    x_teacher_id: Optional[int] = Header(default=None),
    db: Session = Depends(get_db),
) -> Teacher:
    """Retourne l'enseignant actif correspondant à X-Teacher-Id, sinon 401."""
    if x_teacher_id is None:
        raise HTTPException(status_code=401, detail="En-tête X-Teacher-Id manquant.")
    teacher = db.get(Teacher, x_teacher_id)
    if teacher is None or not teacher.active:
        raise HTTPException(status_code=401, detail="Enseignant inconnu ou inactif.")
    return teacher
