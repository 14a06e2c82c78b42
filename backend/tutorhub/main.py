"""
Point d'entrée principal de l'API TutorHub.
Démarrage : uvicorn tutorhub.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import tutorhub.models  # noqa: F401 (enregistre tous les modèles dans Base.metadata avant les routers)
from tutorhub.exceptions import RequestWorkflowError
from tutorhub.routers import student_requests

logger = logging.getLogger(__name__)


app = FastAPI(
    title="TutorHub API",
    description="API de mise en relation élèves / tuteurs : demandes de tutorat et assignations",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(student_requests.router)


@app.exception_handler(RequestWorkflowError)
async def workflow_exception_handler(request: Request, exc: RequestWorkflowError) -> JSONResponse:
    """Traduit les erreurs métier (400/403/404/409) en réponse JSON homogène."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """401 d'authentification, routes inconnues… : même enveloppe que les erreurs métier."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées (BDD indisponible, bug…).
    Le client reçoit un message générique, le détail reste dans les logs.
    """
    logger.error("Exception non gérée sur %s %s : %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "An internal error occurred."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "TutorHub API", "version": "0.1.0"}
