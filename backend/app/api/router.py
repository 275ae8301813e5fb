from fastapi import APIRouter

from .health import router as health_router

from app.api.apostas import router as apostas_router
from app.api.bancas import router as bancas_router
from app.api.financeiro import router as financeiro_router
from app.api.perfil import router as perfil_router
from app.api.status import router as status_router

"""
Router principal de l’API.

Rôle (fonctionnel) :
- Regroupe les routeurs par domaine (health, bancas, apostas, financeiro, perfil, statut système).
- Sert de point d’entrée unique pour l’inclusion dans l’application FastAPI.
"""

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(bancas_router)
api_router.include_router(apostas_router)
api_router.include_router(financeiro_router)
api_router.include_router(perfil_router)
api_router.include_router(status_router)
