"""
Point d'entrée principal de l'API Tutorat.
Démarrage : uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import app.models  # noqa: F401  (enregistre tous les modèles dans Base.metadata avant les routers)
from app.config import settings
from app.database import SessionLocal, create_tables
from app.routers import attendances, auth, courses, questions, sessions, users
from app.services import auth_service

logger = logging.getLogger(__name__)


def init_database() -> None:
    """Crée les tables si demandé puis le compte administrateur configuré."""
    if settings.CREATE_TABLES:
        create_tables()

    if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD:
        db = SessionLocal()
        try:
            auth_service.ensure_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
        finally:
            db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : initialise la base au démarrage."""
    init_database()
    yield


app = FastAPI(
    title="Tutorat API",
    description="API de gestion des séances de tutorat : inscriptions, présences, cours et questions",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
# allow_origin_regex est nécessaire pour les requêtes preflight POST avec Content-Type JSON.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(auth.router)
app.include_router(sessions.router)
app.include_router(users.router)
app.include_router(attendances.router)
app.include_router(courses.router)
app.include_router(questions.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "Tutorat API", "version": "0.1.0"}
