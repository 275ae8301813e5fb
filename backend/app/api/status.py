from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.bet import Bet

"""
API System Status.

Rôle (fonctionnel) :
- Expose un endpoint de statut “healthcheck” pour la plateforme.
- Vérifie la disponibilité de la base (requête simple).
- Fournit une information de fraîcheur via la date de la dernière aposta modifiée.
"""

log = logging.getLogger("app.status")

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/status")
async def system_status(db: AsyncSession = Depends(get_db)):
    # 1) DB check (requête minimale)
    db_ok = True
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        log.warning("status_db_unreachable", exc_info=True)
        db_ok = False

    # 2) Last update (dernière aposta)
    last_update = None
    if db_ok:
        try:
            value = (await db.execute(select(func.max(Bet.updated_at)))).scalar_one_or_none()
            last_update = value.isoformat() if value else None
        except SQLAlchemyError:
            last_update = None

    # Réponse (format constant) pour monitoring / UI
    return {
        "ok": db_ok,
        "db": {"ok": db_ok},
        "last_update": last_update,
        "ts": datetime.now(timezone.utc).isoformat(),
    }
