from __future__ import annotations

import base64
import logging
import time
from collections import defaultdict

from fastapi import APIRouter
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import CurrentUserDep, DbDep
from app.core.errors import AppHTTPException
from app.core.settings import settings
from app.models.bankroll import Bankroll
from app.models.bet import Bet
from app.models.financial_transaction import TIPO_DEPOSITO, FinancialTransaction
from app.schemas.bancas import BancaCreate, BancaUpdate
from app.services.bankroll_fields import bankroll_record, sanitize_bankroll
from app.services.bet_calculations import bankroll_metrics

"""
API Bancas.

Rôle (fonctionnel) :
- CRUD des bancas de l’utilisateur authentifié.
- Liste enrichie de metricas (dépôts, retraits, mises, résultat, solde courant).
- Génération d’un lien de partage.

Notes :
- Toute banca renvoyée passe par sanitize_bankroll (jamais de "cor" en sortie).
- Une seule banca padrão par utilisateur : marquer une banca ePadrao démarque les autres.
- Une banca d’un autre utilisateur est traitée comme inexistante (404).
"""

log = logging.getLogger("app.bancas")

router = APIRouter(prefix="/bancas", tags=["bancas"])

SALDO_INICIAL_LABEL = "Saldo inicial"


async def _owned_banca(db: AsyncSession, banca_id: str, user_id: str) -> Bankroll:
    banca = (
        await db.execute(select(Bankroll).where(Bankroll.id == banca_id, Bankroll.usuario_id == user_id))
    ).scalar_one_or_none()
    if banca is None:
        raise AppHTTPException(404, "NOT_FOUND", "Banca não encontrada")
    return banca


@router.post("")
async def create_banca(payload: BancaCreate, user_id: str = CurrentUserDep, db: AsyncSession = DbDep):
    if payload.ePadrao:
        await db.execute(
            update(Bankroll)
            .where(Bankroll.usuario_id == user_id, Bankroll.e_padrao.is_(True))
            .values(e_padrao=False)
        )

    banca = Bankroll(
        usuario_id=user_id,
        nome=payload.nome,
        descricao=payload.descricao,
        status=payload.status or "Ativa",
        e_padrao=bool(payload.ePadrao),
    )
    db.add(banca)
    await db.flush()

    # Le saldo initial est un dépôt, pas une colonne
    if payload.saldoInicial is not None and payload.saldoInicial > 0:
        db.add(
            FinancialTransaction(
                banca_id=banca.id,
                tipo=TIPO_DEPOSITO,
                casa_de_aposta=SALDO_INICIAL_LABEL,
                valor=payload.saldoInicial,
                observacao="Saldo inicial configurado na criação da banca",
            )
        )

    await db.commit()
    await db.refresh(banca)

    log.info("banca_created", extra={"user_id": user_id, "banca_id": banca.id})
    return sanitize_bankroll(bankroll_record(banca))


@router.get("")
async def list_bancas(user_id: str = CurrentUserDep, db: AsyncSession = DbDep):
    bancas = (
        await db.execute(
            select(Bankroll).where(Bankroll.usuario_id == user_id).order_by(Bankroll.criado_em.desc())
        )
    ).scalars().all()

    if not bancas:
        return []

    # Chargement groupé (évite N+1) puis regroupement par banca
    banca_ids = [b.id for b in bancas]
    apostas = (await db.execute(select(Bet).where(Bet.banca_id.in_(banca_ids)))).scalars().unique().all()
    transacoes = (
        await db.execute(select(FinancialTransaction).where(FinancialTransaction.banca_id.in_(banca_ids)))
    ).scalars().all()

    apostas_por_banca = defaultdict(list)
    for aposta in apostas:
        apostas_por_banca[aposta.banca_id].append(aposta)

    transacoes_por_banca = defaultdict(list)
    for transacao in transacoes:
        transacoes_por_banca[transacao.banca_id].append(transacao)

    result = []
    for banca in bancas:
        record = bankroll_record(banca)
        record["metricas"] = bankroll_metrics(apostas_por_banca[banca.id], transacoes_por_banca[banca.id])
        result.append(sanitize_bankroll(record))
    return result


@router.put("/{banca_id}")
async def update_banca(
    banca_id: str,
    payload: BancaUpdate,
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
):
    banca = await _owned_banca(db, banca_id, user_id)

    if payload.ePadrao:
        await db.execute(
            update(Bankroll)
            .where(Bankroll.usuario_id == user_id, Bankroll.id != banca_id)
            .values(e_padrao=False)
        )

    supplied = payload.model_fields_set
    if payload.nome:
        banca.nome = payload.nome
    if "descricao" in supplied:
        banca.descricao = payload.descricao
    if payload.status:
        banca.status = payload.status
    if payload.ePadrao is not None:
        banca.e_padrao = payload.ePadrao

    await db.commit()
    await db.refresh(banca)
    return sanitize_bankroll(bankroll_record(banca))


@router.delete("/{banca_id}")
async def delete_banca(banca_id: str, user_id: str = CurrentUserDep, db: AsyncSession = DbDep):
    await _owned_banca(db, banca_id, user_id)

    # Apostas et transactions d’abord (FK vers bankrolls)
    await db.execute(delete(Bet).where(Bet.banca_id == banca_id))
    await db.execute(delete(FinancialTransaction).where(FinancialTransaction.banca_id == banca_id))
    await db.execute(delete(Bankroll).where(Bankroll.id == banca_id))
    await db.commit()

    log.info("banca_deleted", extra={"user_id": user_id, "banca_id": banca_id})
    return {"message": "Banca deletada com sucesso"}


@router.get("/{banca_id}/compartilhar")
async def share_banca(banca_id: str, user_id: str = CurrentUserDep, db: AsyncSession = DbDep):
    await _owned_banca(db, banca_id, user_id)

    raw = f"{banca_id}-{int(time.time() * 1000)}"
    codigo = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    return {
        "codigo": codigo,
        "link": f"{settings.FRONTEND_URL.rstrip('/')}/banca/{codigo}",
    }
