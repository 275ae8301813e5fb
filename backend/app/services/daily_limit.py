from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.bankroll import Bankroll
from app.models.bet import Bet

"""
Daily Limit.

Rôle (fonctionnel) :
- Fenêtre “jour courant” du quota d’apostas (00:00 UTC -> 00:00 UTC du lendemain).
- Comptage des apostas créées par un utilisateur dans cette fenêtre.
Utilisé par POST /apostas (refus 403) et GET /perfil/consumo (affichage).
"""


def day_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """(début du jour, prochain reset) en UTC."""
    now = now or datetime.now(timezone.utc)
    start = now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


async def count_bets_since(db: AsyncSession, user_id: str, since: datetime) -> int:
    stmt = (
        select(func.count(Bet.id))
        .select_from(Bet)
        .join(Bankroll, Bankroll.id == Bet.banca_id)
        .where(Bankroll.usuario_id == user_id, Bet.created_at >= since)
    )
    return int((await db.execute(stmt)).scalar_one())


def usage_percent(used: int, limit: int) -> int:
    """Pourcentage consommé (0 pour un plan illimité)."""
    if limit <= 0:
        return 0
    return round(used / limit * 100)
