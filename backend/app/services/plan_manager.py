from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import Request
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.base import utcnow
from app.models.plan import Plan
from app.models.user import User

"""
Plan Manager.

Rôle (fonctionnel) :
- Remet un utilisateur sur son plan “normal” quand sa promo a expiré.
- Plan de repli : le plan d’origine enregistré à l’activation de la promo, sinon le plan
  nommé FALLBACK_PLAN_NAME (id mis en cache).

Comportement (ensure_active_plan) :
- Utilisateur inconnu, pas de promo, ou promo encore valide : aucune écriture.
- Promo expirée sans plan de repli résolvable : WARNING, l’utilisateur garde son plan.
- Sinon : 1 UPDATE (planoId = repli, promoOriginalPlanId = NULL, promoExpiresAt = NULL) + commit.

Notes :
- Correction best-effort : try_ensure_active_plan() ne bloque jamais la requête appelante.
- Le cache n’a pas de verrou : deux premières résolutions concurrentes écrivent le même id.
"""

log = logging.getLogger("app.plans")


def as_utc(dt: datetime) -> datetime:
    # SQLite (tests / dev) renvoie des datetimes naïfs : on les considère en UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class FallbackPlanCache:
    """
    Cache de l’id du plan de repli.

    - ttl_seconds=None : valeur conservée toute la durée du process.
    - ttl_seconds>0   : valeur expirée après ttl_seconds (plan renommé / supprimé).
    - invalidate()    : purge explicite (scripts d’admin, tests).
    """

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds if ttl_seconds and ttl_seconds > 0 else None
        self._clock = clock
        self._value: Optional[str] = None
        self._stored_at = 0.0

    def get(self) -> Optional[str]:
        if self._value is None:
            return None
        if self._ttl is not None and (self._clock() - self._stored_at) >= self._ttl:
            self._value = None
            return None
        return self._value

    def set(self, plan_id: str) -> None:
        self._value = plan_id
        self._stored_at = self._clock()

    def invalidate(self) -> None:
        self._value = None


class PlanFallbackManager:
    """Vérifie / applique l’expiration des plans promotionnels."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        fallback_plan_name: str = "Free",
        cache: FallbackPlanCache | None = None,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self.fallback_plan_name = fallback_plan_name
        self.cache = cache or FallbackPlanCache()
        self._now = now

    def now(self) -> datetime:
        """Horloge du gestionnaire (injectable : tests, routes promo)."""
        return self._now()

    async def fallback_plan_id(self, session: AsyncSession) -> Optional[str]:
        """Id du plan nommé fallback_plan_name (cache d’abord ; un “absent” n’est pas mis en cache)."""
        cached = self.cache.get()
        if cached:
            return cached

        plan_id = (
            await session.execute(select(Plan.id).where(Plan.nome == self.fallback_plan_name))
        ).scalar_one_or_none()
        if plan_id:
            self.cache.set(plan_id)
        return plan_id

    async def ensure_active_plan(self, user_id: str, *, session: AsyncSession | None = None) -> bool:
        """Applique le repli si la promo est expirée. Renvoie True si le plan a été modifié."""
        if session is not None:
            return await self._ensure(session, user_id)

        if self._session_factory is None:
            raise RuntimeError("PlanFallbackManager sans session_factory : passer session=")

        async with self._session_factory() as own_session:
            return await self._ensure(own_session, user_id)

    async def _ensure(self, session: AsyncSession, user_id: str) -> bool:
        row = (
            await session.execute(
                select(User.id, User.promo_original_plan_id, User.promo_expires_at).where(User.id == user_id)
            )
        ).first()

        if row is None or row.promo_expires_at is None:
            return False

        if as_utc(row.promo_expires_at) > self._now():
            return False

        fallback_id = row.promo_original_plan_id or await self.fallback_plan_id(session)
        if not fallback_id:
            log.warning("Plano fallback indeterminado ao expirar promoção", extra={"user_id": user_id})
            return False

        await session.execute(
            update(User)
            .where(User.id == user_id)
            .values(plano_id=fallback_id, promo_original_plan_id=None, promo_expires_at=None)
        )
        await session.commit()

        log.info("promo_expired_plan_reverted", extra={"user_id": user_id, "plan_id": fallback_id})
        return True

    async def try_ensure_active_plan(self, user_id: str, *, session: AsyncSession | None = None) -> bool:
        """Variante best-effort : une erreur DB est loguée, jamais propagée à la requête."""
        try:
            return await self.ensure_active_plan(user_id, session=session)
        except SQLAlchemyError:
            log.exception("plan_fallback_failed", extra={"user_id": user_id})
            if session is not None:
                await session.rollback()
            return False


def get_plan_manager(request: Request) -> PlanFallbackManager:
    """Dépendance FastAPI : gestionnaire partagé (créé au démarrage de l’app)."""
    return request.app.state.plan_manager
