"""
Point d'entrée principal de l'API planning & présences.
Démarrage : uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import app.models  # noqa: F401  enregistre tous les modèles dans Base.metadata avant les routers
from app.config import Settings
from app.config import settings as default_settings
from app.database import build_engine, build_session_factory
from app.routers import attendance, schedules, students

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Construit l'application. Le moteur SQLAlchemy (et son pool) est créé ici
    et porté par app.state : aucune connexion globale au niveau module.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        """Cycle de vie : ferme le pool de connexions à l'arrêt."""
        yield
        application.state.engine.dispose()
        logger.info("Pool de connexions fermé.")

    logging.basicConfig(level=settings.LOG_LEVEL)

    application = FastAPI(
        title="Course Scheduling & Attendance API",
        description="Planning des séances, détection de conflits et saisie des présences",
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    engine = build_engine(settings)
    application.state.settings = settings
    application.state.engine = engine
    application.state.session_factory = build_session_factory(engine)

    # CORS : autorise tous les ports localhost en développement (à restreindre en production).
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[],
        allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["Content-Type", "Authorization", "Accept", "X-User-Id", "X-User-Role"],
    )

    application.include_router(schedules.router)
    application.include_router(attendance.router)
    application.include_router(students.router)

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
        passe bien par CORSMiddleware (qui injecte les headers CORS).
        """
        logger.error("Exception non gérée : %s", exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Une erreur interne est survenue.", "kind": "InternalError"},
        )

    @application.get("/api/health", tags=["Santé"])
    def health_check():
        """Vérifie que l'API est opérationnelle."""
        return {"status": "ok", "service": "Course Scheduling & Attendance API", "version": "0.1.0"}

    return application


app = create_app()
