from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from fastapi import APIRouter
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import CurrentUserDep, DbDep, PlanManagerDep
from app.core.errors import AppHTTPException
from app.core.settings import settings
from app.models.plan import Plan
from app.models.promo_code_redemption import PromoCodeRedemption
from app.models.user import User
from app.schemas.perfil import PlanoUpdate, PromoCodeRedeem
from app.services.daily_limit import count_bets_since, day_window, usage_percent
from app.services.plan_manager import PlanFallbackManager, as_utc

"""
API Perfil.

Rôle (fonctionnel) :
- Profil de l’utilisateur authentifié (plan courant inclus, jamais le hash du mot de passe).
- Catalogue des plans, changement de plan et consommation du quota quotidien.
- Activation du code promo : plan PROMO_PLAN_NAME pendant PROMO_DURATION_DAYS jours,
  le plan courant étant mémorisé comme plan de repli.

Notes :
- Chaque endpoint applique d’abord l’expiration de promo (best-effort) :
  le plan renvoyé est donc toujours le plan effectif.
"""

log = logging.getLogger("app.perfil")

router = APIRouter(prefix="/perfil", tags=["perfil"])


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt is not None else None


def plan_record(plan: Plan) -> Dict[str, Any]:
    return {
        "id": plan.id,
        "nome": plan.nome,
        "preco": plan.preco,
        "limiteApostasDiarias": plan.limite_apostas_diarias,
    }


def profile_record(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "nomeCompleto": user.nome_completo,
        "email": user.email,
        "membroDesde": _iso(user.membro_desde),
        "statusConta": user.status_conta,
        "updatedAt": _iso(user.updated_at),
        "telegramId": user.telegram_id,
        "promoExpiresAt": _iso(user.promo_expires_at),
        "plano": plan_record(user.plano) if user.plano else None,
    }


async def _load_user(db: AsyncSession, user_id: str) -> User:
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if user is None:
        log.warning("profile_user_not_found", extra={"user_id": user_id})
        raise AppHTTPException(404, "NOT_FOUND", "Usuário não encontrado")
    return user


async def _reload_user(db: AsyncSession, user_id: str) -> User:
    # populate_existing : relit plano (joined) après un changement de planoId
    return (
        await db.execute(select(User).where(User.id == user_id).execution_options(populate_existing=True))
    ).scalar_one()


@router.get("")
async def get_perfil(
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
    plans: PlanFallbackManager = PlanManagerDep,
):
    await plans.try_ensure_active_plan(user_id, session=db)
    user = await _load_user(db, user_id)
    return profile_record(user)


@router.get("/planos")
async def list_planos(
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
    plans: PlanFallbackManager = PlanManagerDep,
):
    await plans.try_ensure_active_plan(user_id, session=db)
    rows = (await db.execute(select(Plan).order_by(Plan.limite_apostas_diarias.asc()))).scalars().all()
    return [plan_record(p) for p in rows]


@router.put("/plano")
async def update_plano(
    payload: PlanoUpdate,
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
    plans: PlanFallbackManager = PlanManagerDep,
):
    await plans.try_ensure_active_plan(user_id, session=db)
    user = await _load_user(db, user_id)

    plan = (await db.execute(select(Plan).where(Plan.id == payload.planoId))).scalar_one_or_none()
    if plan is None:
        raise AppHTTPException(404, "NOT_FOUND", "Plano não encontrado")

    user.plano_id = plan.id
    await db.commit()
    user = await _reload_user(db, user_id)

    log.info("plan_changed", extra={"user_id": user_id, "plan_id": plan.id})
    return {"message": f"Plano atualizado para {plan.nome}", "user": profile_record(user)}


@router.get("/consumo")
async def get_consumo(
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
    plans: PlanFallbackManager = PlanManagerDep,
):
    await plans.try_ensure_active_plan(user_id, session=db)
    user = await _load_user(db, user_id)

    inicio_dia, proximo_reset = day_window()
    apostas_hoje = await count_bets_since(db, user_id, inicio_dia)
    limite = user.plano.limite_apostas_diarias if user.plano else 0

    return {
        "plano": {"nome": user.plano.nome if user.plano else None, "limiteDiario": limite},
        "consumo": {
            "apostasHoje": apostas_hoje,
            "limite": limite,
            "porcentagem": usage_percent(apostas_hoje, limite),
            "proximoReset": proximo_reset.isoformat(),
        },
    }


@router.post("/promo-code")
async def redeem_promo_code(
    payload: PromoCodeRedeem,
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
    plans: PlanFallbackManager = PlanManagerDep,
):
    await plans.try_ensure_active_plan(user_id, session=db)

    code = settings.PROMO_CODE
    if payload.normalized() != code:
        raise AppHTTPException(400, "INVALID_PROMO_CODE", "Código inválido.")

    already_used = (
        await db.execute(
            select(PromoCodeRedemption.id).where(
                PromoCodeRedemption.code == code, PromoCodeRedemption.user_id == user_id
            )
        )
    ).scalar_one_or_none()
    if already_used is not None:
        raise AppHTTPException(400, "PROMO_ALREADY_USED", "Você já utilizou este código.")

    total_uses = int(
        (
            await db.execute(select(func.count(PromoCodeRedemption.id)).where(PromoCodeRedemption.code == code))
        ).scalar_one()
    )
    if total_uses >= settings.PROMO_USAGE_LIMIT:
        raise AppHTTPException(400, "PROMO_EXHAUSTED", "Este código promocional já expirou.")

    promo_plan = (
        await db.execute(select(Plan).where(Plan.nome == settings.PROMO_PLAN_NAME))
    ).scalar_one_or_none()
    if promo_plan is None:
        log.error("promo_plan_missing", extra={"user_id": user_id})
        raise AppHTTPException(500, "SERVER_MISCONFIG", "Plano profissional não encontrado.")

    user = await _load_user(db, user_id)
    now = plans.now()
    if user.promo_expires_at is not None and as_utc(user.promo_expires_at) > now:
        raise AppHTTPException(400, "PROMO_ACTIVE", "Você já possui um plano promocional ativo.")

    expires_at = now + timedelta(days=settings.PROMO_DURATION_DAYS)

    # Redemption + changement de plan : un seul commit
    db.add(PromoCodeRedemption(code=code, user_id=user_id, redeemed_at=now))
    user.promo_original_plan_id = user.promo_original_plan_id or user.plano_id
    user.plano_id = promo_plan.id
    user.promo_expires_at = expires_at
    await db.commit()

    user = await _reload_user(db, user_id)
    log.info("promo_code_redeemed", extra={"user_id": user_id, "plan_id": promo_plan.id})
    return {
        "message": f"Plano {promo_plan.nome} liberado por {settings.PROMO_DURATION_DAYS} dias! Aproveite.",
        "expiresAt": expires_at.isoformat(),
        "remainingUses": max(0, settings.PROMO_USAGE_LIMIT - (total_uses + 1)),
        "profile": profile_record(user),
    }
