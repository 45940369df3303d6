"""
Accès PostgreSQL pour l'API Tutorat : moteur, fabrique de sessions et base déclarative.
Chaque requête HTTP reçoit sa propre session via la dépendance get_db.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import settings

logger = logging.getLogger(__name__)

# pool_pre_ping : évite les erreurs sur les connexions fermées par le serveur
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def create_tables() -> None:
    """Crée les tables manquantes (utilisateurs, séances, inscriptions, présences, cours, questions)."""
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Tables vérifiées / créées : %s", ", ".join(sorted(Base.metadata.tables)))


def get_db():
    """Dépendance FastAPI : ouvre une session pour la requête et la referme ensuite."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
