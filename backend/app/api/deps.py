from __future__ import annotations

from fastapi import Depends

from app.core.events import get_bet_bus
from app.core.security import require_user
from app.db.session import get_db
from app.services.plan_manager import get_plan_manager

"""
Dépendances API.

Rôle (fonctionnel) :
- Centralise les dépendances réutilisables sur les routes.
- Auth JWT (userId), session DB, bus d’événements des apostas, gestionnaire de plans.
"""

# userId authentifié (401 / 403 / 500 sinon)
CurrentUserDep = Depends(require_user)

DbDep = Depends(get_db)
BetBusDep = Depends(get_bet_bus)
PlanManagerDep = Depends(get_plan_manager)
