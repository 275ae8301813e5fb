from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import BetBusDep, CurrentUserDep, DbDep, PlanManagerDep
from app.core.errors import AppHTTPException
from app.core.events import BetEvent, BetEventBus, emit_bet_event
from app.core.rate_limit import limit_bet_updates
from app.core.settings import settings
from app.models.bankroll import Bankroll
from app.models.bet import Bet
from app.models.user import User
from app.schemas.apostas import DELETE_ALL_CONFIRMATION, ApostaCreate, ApostaUpdate, DeleteAllRequest
from app.services.bet_calculations import bets_summary, calcular_resultado_aposta, status_label
from app.services.bet_filters import BetFilters, build_bet_conditions
from app.services.daily_limit import count_bets_since, day_window
from app.services.plan_manager import PlanFallbackManager

"""
API Apostas.

Rôle (fonctionnel) :
- Enregistre, liste, modifie et supprime les apostas de l’utilisateur authentifié.
- Applique la limite quotidienne du plan (comptage depuis 00:00 UTC) avant toute création.
- Publie un BetEvent (created / updated / deleted) sur le bus de l’application.
- Expose un résumé, les 5 dernières apostas et un flux SSE (/apostas/stream).

Notes :
- Une aposta dont la banca appartient à un autre utilisateur est traitée comme inexistante (404).
- Le stream accepte ?token=... (EventSource ne sait pas envoyer d’en-tête Authorization).
"""

log = logging.getLogger("app.apostas")

router = APIRouter(prefix="/apostas", tags=["apostas"])

RECENT_LIMIT = 5


def _iso(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def serialize_bet(bet: Bet, *, with_banca: bool = False) -> Dict[str, Any]:
    """Aposta au format HTTP : jogo / dataJogo exposés aussi en evento / dataEvento."""
    data: Dict[str, Any] = {
        "id": bet.id,
        "bancaId": bet.banca_id,
        "esporte": bet.esporte,
        "jogo": bet.jogo,
        "evento": bet.jogo,
        "torneio": bet.torneio,
        "pais": bet.pais,
        "mercado": bet.mercado,
        "tipoAposta": bet.tipo_aposta,
        "valorApostado": bet.valor_apostado,
        "odd": bet.odd,
        "bonus": bet.bonus,
        "dataJogo": _iso(bet.data_jogo),
        "dataEvento": _iso(bet.data_jogo),
        "tipster": bet.tipster,
        "status": bet.status,
        "casaDeAposta": bet.casa_de_aposta,
        "retornoObtido": bet.retorno_obtido,
        "aposta": bet.aposta,
        "createdAt": _iso(bet.created_at),
        "updatedAt": _iso(bet.updated_at),
    }
    if with_banca and bet.banca is not None:
        data["banca"] = {"id": bet.banca.id, "nome": bet.banca.nome}
    return data


async def _user_banca_ids(db: AsyncSession, user_id: str) -> List[str]:
    rows = await db.execute(select(Bankroll.id).where(Bankroll.usuario_id == user_id))
    return list(rows.scalars().all())


async def _owned_bet(db: AsyncSession, bet_id: str, user_id: str) -> Bet:
    bet = (
        await db.execute(
            select(Bet).join(Bankroll, Bankroll.id == Bet.banca_id).where(
                Bet.id == bet_id, Bankroll.usuario_id == user_id
            )
        )
    ).scalar_one_or_none()
    if bet is None:
        raise AppHTTPException(404, "NOT_FOUND", "Aposta não encontrada")
    return bet


async def _ensure_owned_banca(db: AsyncSession, banca_id: str, user_id: str) -> None:
    found = (
        await db.execute(select(Bankroll.id).where(Bankroll.id == banca_id, Bankroll.usuario_id == user_id))
    ).scalar_one_or_none()
    if found is None:
        raise AppHTTPException(404, "NOT_FOUND", "Banca não encontrada")


async def _check_daily_limit(db: AsyncSession, user_id: str) -> None:
    """403 si le nombre d’apostas créées aujourd’hui atteint la limite du plan (0 = illimité)."""
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if user is None or user.plano is None or user.plano.ilimitado:
        return

    plano = user.plano
    inicio_dia, proximo_reset = day_window()
    apostas_hoje = await count_bets_since(db, user_id, inicio_dia)

    if apostas_hoje >= plano.limite_apostas_diarias:
        log.info(
            "daily_limit_reached",
            extra={"user_id": user_id, "plan_id": plano.id},
        )
        raise AppHTTPException(
            403,
            "PLAN_LIMIT_REACHED",
            f"Limite diário de apostas do plano {plano.nome} atingido "
            f"({apostas_hoje}/{plano.limite_apostas_diarias}). "
            f"O limite será resetado em {proximo_reset:%d/%m/%Y %H:%M} (UTC).",
            details={
                "used": apostas_hoje,
                "limit": plano.limite_apostas_diarias,
                "resetAt": proximo_reset.isoformat(),
            },
        )


@router.post("")
async def create_aposta(
    payload: ApostaCreate,
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
    bus: BetEventBus = BetBusDep,
    plans: PlanFallbackManager = PlanManagerDep,
):
    await _ensure_owned_banca(db, payload.bancaId, user_id)

    # Promo expirée : le plan de repli s’applique avant le contrôle de limite
    await plans.try_ensure_active_plan(user_id, session=db)
    await _check_daily_limit(db, user_id)

    bet = Bet(**payload.to_columns())
    db.add(bet)
    await db.commit()
    await db.refresh(bet)

    emit_bet_event(bus, user_id, "created", {"betId": bet.id})
    log.info("bet_created", extra={"user_id": user_id, "bet_id": bet.id, "banca_id": bet.banca_id})
    return serialize_bet(bet)


@router.get("")
async def list_apostas(
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
    bancaId: Optional[str] = None,
    esporte: Optional[str] = None,
    status: Optional[str] = None,
    tipster: Optional[str] = None,
    casa: Optional[str] = None,
    oddMin: Optional[str] = None,
    oddMax: Optional[str] = None,
    dataInicio: Optional[str] = None,
    dataFim: Optional[str] = None,
    evento: Optional[str] = None,
):
    banca_ids = await _user_banca_ids(db, user_id)
    if bancaId:
        banca_ids = [b for b in banca_ids if b == bancaId]
    if not banca_ids:
        return []

    conditions = build_bet_conditions(
        BetFilters(
            banca_ids=banca_ids,
            esporte=esporte,
            status=status,
            tipster=tipster,
            casa=casa,
            odd_min=oddMin,
            odd_max=oddMax,
            data_inicio=dataInicio,
            data_fim=dataFim,
            evento=evento,
        )
    )

    bets = (await db.execute(select(Bet).where(*conditions).order_by(Bet.data_jogo.desc()))).scalars().all()
    return [serialize_bet(b, with_banca=True) for b in bets]


@router.get("/resumo")
async def resumo_apostas(user_id: str = CurrentUserDep, db: AsyncSession = DbDep, bancaId: Optional[str] = None):
    banca_ids = await _user_banca_ids(db, user_id)
    if bancaId:
        banca_ids = [b for b in banca_ids if b == bancaId]

    bets = []
    if banca_ids:
        bets = (await db.execute(select(Bet).where(Bet.banca_id.in_(banca_ids)))).scalars().all()
    return bets_summary(list(bets))


@router.get("/recentes")
async def apostas_recentes(user_id: str = CurrentUserDep, db: AsyncSession = DbDep, bancaId: Optional[str] = None):
    banca_ids = await _user_banca_ids(db, user_id)
    if bancaId:
        banca_ids = [b for b in banca_ids if b == bancaId]
    if not banca_ids:
        return []

    bets = (
        await db.execute(
            select(Bet).where(Bet.banca_id.in_(banca_ids)).order_by(Bet.created_at.desc()).limit(RECENT_LIMIT)
        )
    ).scalars().all()

    return [
        {
            "id": b.id,
            "evento": f"{b.jogo} - {b.torneio}" if b.torneio else b.jogo,
            "odd": str(b.odd) if b.odd is not None else "-",
            "status": status_label(b.status),
            "lucro": calcular_resultado_aposta(b.status, b.valor_apostado, b.retorno_obtido),
            "dataJogo": _iso(b.data_jogo),
            "esporte": b.esporte,
            "casaDeAposta": b.casa_de_aposta,
        }
        for b in bets
    ]


def format_sse(event: BetEvent) -> str:
    """Trame SSE `bet-update` (type + payload)."""
    data = json.dumps({"type": event.type, "payload": event.payload}, ensure_ascii=False)
    return f"event: bet-update\ndata: {data}\n\n"


async def bet_event_stream(request: Request, user_id: str, bus: BetEventBus, heartbeat: float):
    """
    Flux SSE d’un utilisateur.

    - Abonnement au bus à la 1re itération (jamais avant le démarrage de la réponse).
    - ": keep-alive" toutes les `heartbeat` secondes sans événement.
    - Fin du flux : déconnexion du client ou fermeture du bus.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[Optional[BetEvent]] = asyncio.Queue()

    def _on_event(event: BetEvent) -> None:
        # Seuls les événements de l’utilisateur connecté sont relayés
        if event.user_id == user_id:
            loop.call_soon_threadsafe(queue.put_nowait, event)

    def _on_close() -> None:
        loop.call_soon_threadsafe(queue.put_nowait, None)

    unsubscribe = bus.subscribe(_on_event)
    remove_close_hook = bus.on_close(_on_close)
    try:
        yield ": connected\n\n"
        while not bus.closed and not await request.is_disconnected():
            try:
                event = await asyncio.wait_for(queue.get(), timeout=heartbeat)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            if event is None:
                break
            yield format_sse(event)
    finally:
        unsubscribe()
        remove_close_hook()


@router.get("/stream")
async def stream_apostas(request: Request, user_id: str = CurrentUserDep, bus: BetEventBus = BetBusDep):
    return StreamingResponse(
        bet_event_stream(request, user_id, bus, settings.BET_STREAM_HEARTBEAT_S),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"},
    )


@router.delete("/all")
async def delete_all_apostas(
    payload: Optional[DeleteAllRequest] = Body(default=None),
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
    bus: BetEventBus = BetBusDep,
):
    if payload is None or payload.confirmacao != DELETE_ALL_CONFIRMATION:
        raise AppHTTPException(400, "INVALID_CONFIRMATION", "Confirmação inválida. Esta ação é irreversível.")

    banca_ids = await _user_banca_ids(db, user_id)
    count = 0
    if banca_ids:
        result = await db.execute(delete(Bet).where(Bet.banca_id.in_(banca_ids)))
        count = result.rowcount or 0
        await db.commit()

    emit_bet_event(bus, user_id, "deleted", {"scope": "all"})
    log.warning("bets_deleted_all", extra={"user_id": user_id, "event_type": "deleted"})
    return {"message": f"{count} apostas deletadas com sucesso", "count": count}


@router.put("/{aposta_id}", dependencies=[Depends(limit_bet_updates)])
async def update_aposta(
    aposta_id: str,
    payload: ApostaUpdate,
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
    bus: BetEventBus = BetBusDep,
):
    bet = await _owned_bet(db, aposta_id, user_id)

    values = payload.to_columns()
    if "banca_id" in values and values["banca_id"] != bet.banca_id:
        await _ensure_owned_banca(db, values["banca_id"], user_id)

    for column, value in values.items():
        setattr(bet, column, value)

    await db.commit()
    await db.refresh(bet)

    emit_bet_event(bus, user_id, "updated", {"betId": bet.id})
    return serialize_bet(bet)


@router.delete("/{aposta_id}")
async def delete_aposta(
    aposta_id: str,
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
    bus: BetEventBus = BetBusDep,
):
    await _owned_bet(db, aposta_id, user_id)

    await db.execute(delete(Bet).where(Bet.id == aposta_id))
    await db.commit()

    emit_bet_event(bus, user_id, "deleted", {"betId": aposta_id})
    return {"message": "Aposta deletada com sucesso"}
