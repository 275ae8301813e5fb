from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from sqlalchemy import or_

from app.models.bet import Bet

"""
Bet Filters.

Rôle (fonctionnel) :
- Traduit les filtres de GET /apostas (query string) en conditions SQLAlchemy.
- Filtres texte (esporte, tipster, casa, evento) : “contient”, insensible à la casse.
- Valeurs invalides (date illisible, odd <= 0 ou non numérique) : filtre ignoré, pas d’erreur.
"""


@dataclass
class BetFilters:
    banca_ids: Sequence[str]
    esporte: Optional[str] = None
    status: Optional[str] = None
    tipster: Optional[str] = None
    casa: Optional[str] = None
    odd_min: Optional[str] = None
    odd_max: Optional[str] = None
    data_inicio: Optional[str] = None
    data_fim: Optional[str] = None
    evento: Optional[str] = None


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """ISO 8601 (date seule ou datetime, "Z" accepté) ; None si illisible."""
    if not value:
        return None
    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_positive_odd(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        odd = float(value)
    except ValueError:
        return None
    # NaN échoue aussi à ce test
    if not odd > 0:
        return None
    return odd


def build_bet_conditions(filters: BetFilters) -> List[Any]:
    """Liste de conditions à passer à select(Bet).where(*conditions)."""
    conditions: List[Any] = [Bet.banca_id.in_(list(filters.banca_ids))]

    inicio = parse_date(filters.data_inicio)
    if inicio is not None:
        conditions.append(Bet.data_jogo >= inicio)

    fim = parse_date(filters.data_fim)
    if fim is not None:
        conditions.append(Bet.data_jogo <= fim)

    if filters.tipster:
        conditions.append(Bet.tipster.icontains(filters.tipster, autoescape=True))
    if filters.casa:
        conditions.append(Bet.casa_de_aposta.icontains(filters.casa, autoescape=True))
    if filters.esporte:
        conditions.append(Bet.esporte.icontains(filters.esporte, autoescape=True))
    if filters.status:
        conditions.append(Bet.status == filters.status)

    odd_min = parse_positive_odd(filters.odd_min)
    if odd_min is not None:
        conditions.append(Bet.odd >= odd_min)

    odd_max = parse_positive_odd(filters.odd_max)
    if odd_max is not None:
        conditions.append(Bet.odd <= odd_max)

    if filters.evento:
        term = filters.evento
        conditions.append(
            or_(
                Bet.jogo.icontains(term, autoescape=True),
                Bet.mercado.icontains(term, autoescape=True),
                Bet.tipo_aposta.icontains(term, autoescape=True),
                Bet.torneio.icontains(term, autoescape=True),
                Bet.pais.icontains(term, autoescape=True),
            )
        )

    return conditions
