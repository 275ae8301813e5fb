from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.router import api_router
from app.core.errors import UTF8JSONResponse, error_response
from app.core.events import BetEventBus
from app.core.logging import setup_logging
from app.core.rate_limit import client_ip
from app.core.request_id import current_request_id, ensure_request_id, set_request_id
from app.core.settings import settings
from app.db.session import AsyncSessionLocal
from app.services.plan_manager import FallbackPlanCache, PlanFallbackManager

"""
Application FastAPI (entrypoint).

Rôle (fonctionnel) :
- Configure l’application (settings, CORS, middlewares, routers).
- Centralise l’observabilité :
  - request_id propagé (X-Request-Id)
  - logs structurés JSON (timing, status, client_ip, user_id)
  - seuil de “slow request”
- Uniformise les erreurs côté client : tous les handlers passent par core.errors.error_response.
- Cycle de vie (lifespan) : crée le bus d’événements des apostas et le gestionnaire de plans
  au démarrage, ferme le bus à l’arrêt.

Ce fichier ne contient pas de logique métier :
- La logique métier est dans app.services
- Les routes sont dans app.api
- Les composants transverses sont dans app.core
"""


# --- Logging (niveau depuis .env si dispo) ---
setup_logging(settings.LOG_LEVEL)

# logger principal projet
log = logging.getLogger("banca")

# logger dédié observabilité HTTP (séparé du métier)
http_log = logging.getLogger("app.http")

# seuil slow request (ms)
SLOW_MS = int(settings.SLOW_REQUEST_MS)


def _split_origins(value: str) -> list[str]:
    """Parse une liste d’origines CORS depuis une string 'a,b,c'."""
    if not value:
        return []
    return [o.strip() for o in value.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 1 bus par application : pas de singleton de module
    app.state.bet_events = BetEventBus()
    app.state.plan_manager = PlanFallbackManager(
        AsyncSessionLocal,
        fallback_plan_name=settings.FALLBACK_PLAN_NAME,
        cache=FallbackPlanCache(ttl_seconds=settings.FALLBACK_PLAN_CACHE_TTL_S or None),
    )
    if not settings.JWT_SECRET:
        log.warning("JWT_SECRET não configurado: rotas autenticadas responderão 500")
    log.info("startup (env=%s)", settings.ENV)
    try:
        yield
    finally:
        app.state.bet_events.close()
        log.info("shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    default_response_class=UTF8JSONResponse,
    lifespan=lifespan,
)

# --- CORS ---
origins = _split_origins(settings.CORS_ORIGINS)

# Origines par défaut en dev (Vite)
default_dev_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or default_dev_origins,
    allow_credentials=True,  # cookie httpOnly access_token
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "X-Request-Id",
    ],
)

# --- Routers ---
app.include_router(api_router)


# --- Middleware observabilité : request_id + timing + logs structurés ---
@app.middleware("http")
async def request_observability(request: Request, call_next):
    # Prend le header s’il existe, sinon génère un UUID
    rid = ensure_request_id(request.headers.get("X-Request-Id"))
    request.state.request_id = rid

    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        duration_ms = int((time.perf_counter() - start) * 1000)

        # Toujours renvoyer le request id au client
        if response is not None:
            response.headers["X-Request-Id"] = rid

        # Slow request => WARNING, sinon INFO
        level = logging.WARNING if duration_ms >= SLOW_MS else logging.INFO
        http_log.log(
            level,
            "request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": getattr(response, "status_code", None),
                "duration_ms": duration_ms,
                "client_ip": client_ip(request),
                "user_id": getattr(request.state, "user_id", None),
            },
        )

        # Reset contextvar (propre en cas de réutilisation event loop / worker)
        set_request_id(None)


def _rid(request: Request) -> str:
    return getattr(request.state, "request_id", None) or current_request_id()


# --- Error handlers : format standard, pas de stacktrace côté client ---
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Erreurs HTTP (AppHTTPException comprise : 401, 403, 404, 429…) -> payload standard."""
    return error_response(exc, _rid(request))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Erreurs de validation des entrées -> 400 + liste des problèmes par champ."""
    return error_response(exc, _rid(request))


@app.exception_handler(ValidationError)
async def pydantic_exception_handler(request: Request, exc: ValidationError):
    return error_response(exc, _rid(request))


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    """Contrainte d’unicité -> 409 ; autre violation -> 500."""
    return error_response(exc, _rid(request))


@app.exception_handler(NoResultFound)
async def not_found_exception_handler(request: Request, exc: NoResultFound):
    return error_response(exc, _rid(request))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Fallback : toute exception non gérée -> status propre à l’erreur (sinon 500) + log serveur."""
    return error_response(exc, _rid(request))
