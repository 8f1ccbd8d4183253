"""
Configuration de la connexion à la base de données PostgreSQL.
Fournit la session par requête (get_db) et la portée transactionnelle explicite
utilisée par les services d'écriture (transaction_scope).
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import settings
from app.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)

engine = create_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dépendance FastAPI : fournit une session BDD et la ferme après usage."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def is_infrastructure_error(exc: BaseException) -> bool:
    """Vrai si l'erreur vient du stockage lui-même (connexion perdue, base indisponible)."""
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


@contextmanager
def transaction_scope(db: Session):
    """
    Unité de travail explicite autour d'une session.

    - sortie normale → COMMIT
    - toute exception → ROLLBACK puis propagation
    - erreur d'infrastructure → ROLLBACK puis StoreUnavailable (rien n'est persisté)
    """
    try:
        yield db
        db.commit()
    except StoreUnavailable:
        db.rollback()
        raise
    except Exception as exc:
        db.rollback()
        if is_infrastructure_error(exc):
            logger.error("Base de données indisponible, transaction annulée : %s", exc)
            raise StoreUnavailable(str(exc)) from exc
        raise
