from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import CurrentUserDep, DbDep
from app.core.errors import AppHTTPException
from app.models.bankroll import Bankroll
from app.models.bet import Bet
from app.models.financial_transaction import FinancialTransaction
from app.schemas.financeiro import TransacaoCreate, TransacaoUpdate
from app.services.bet_calculations import saldo_geral
from app.services.bet_filters import parse_date

"""
API Financeiro.

Rôle (fonctionnel) :
- Mouvements de capital des bancas (Depósito / Saque) : création, mise à jour, suppression, liste.
- Saldo consolidé (toutes bancas ou une seule) avec détail par casa de aposta.

Notes :
- Une transaction n’est visible que via une banca de l’utilisateur : sinon 404.
"""

log = logging.getLogger("app.financeiro")

router = APIRouter(prefix="/financeiro", tags=["financeiro"])


def _iso(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def serialize_transacao(t: FinancialTransaction, *, with_banca: bool = False) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": t.id,
        "bancaId": t.banca_id,
        "tipo": t.tipo,
        "casaDeAposta": t.casa_de_aposta,
        "valor": t.valor,
        "dataTransacao": _iso(t.data_transacao),
        "observacao": t.observacao,
        "createdAt": _iso(t.created_at),
        "updatedAt": _iso(t.updated_at),
    }
    if with_banca and t.banca is not None:
        data["banca"] = {"id": t.banca.id, "nome": t.banca.nome}
    return data


async def _user_banca_ids(db: AsyncSession, user_id: str) -> List[str]:
    rows = await db.execute(select(Bankroll.id).where(Bankroll.usuario_id == user_id))
    return list(rows.scalars().all())


async def _ensure_owned_banca(db: AsyncSession, banca_id: str, user_id: str) -> None:
    found = (
        await db.execute(select(Bankroll.id).where(Bankroll.id == banca_id, Bankroll.usuario_id == user_id))
    ).scalar_one_or_none()
    if found is None:
        raise AppHTTPException(404, "NOT_FOUND", "Banca não encontrada")


async def _owned_transacao(db: AsyncSession, transacao_id: str, user_id: str) -> FinancialTransaction:
    transacao = (
        await db.execute(
            select(FinancialTransaction)
            .join(Bankroll, Bankroll.id == FinancialTransaction.banca_id)
            .where(FinancialTransaction.id == transacao_id, Bankroll.usuario_id == user_id)
        )
    ).scalar_one_or_none()
    if transacao is None:
        raise AppHTTPException(404, "NOT_FOUND", "Transação não encontrada")
    return transacao


@router.post("/transacao")
async def create_transacao(payload: TransacaoCreate, user_id: str = CurrentUserDep, db: AsyncSession = DbDep):
    await _ensure_owned_banca(db, payload.bancaId, user_id)

    transacao = FinancialTransaction(**payload.to_columns())
    db.add(transacao)
    await db.commit()
    await db.refresh(transacao)

    log.info("transaction_created", extra={"user_id": user_id, "banca_id": transacao.banca_id})
    return serialize_transacao(transacao)


@router.put("/transacao/{transacao_id}")
async def update_transacao(
    transacao_id: str,
    payload: TransacaoUpdate,
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
):
    transacao = await _owned_transacao(db, transacao_id, user_id)

    values = payload.to_columns()
    if "banca_id" in values and values["banca_id"] != transacao.banca_id:
        await _ensure_owned_banca(db, values["banca_id"], user_id)

    for column, value in values.items():
        setattr(transacao, column, value)

    await db.commit()
    await db.refresh(transacao)
    return serialize_transacao(transacao)


@router.delete("/transacao/{transacao_id}")
async def delete_transacao(transacao_id: str, user_id: str = CurrentUserDep, db: AsyncSession = DbDep):
    await _owned_transacao(db, transacao_id, user_id)

    await db.execute(delete(FinancialTransaction).where(FinancialTransaction.id == transacao_id))
    await db.commit()

    log.info("transaction_deleted", extra={"user_id": user_id})
    return {"success": True}


@router.get("/transacoes")
async def list_transacoes(
    user_id: str = CurrentUserDep,
    db: AsyncSession = DbDep,
    tipo: Optional[str] = None,
    casa: Optional[str] = None,
    bancaId: Optional[str] = None,
    dataInicio: Optional[str] = None,
    dataFim: Optional[str] = None,
):
    banca_ids = await _user_banca_ids(db, user_id)
    if bancaId:
        banca_ids = [b for b in banca_ids if b == bancaId]
    if not banca_ids:
        return []

    conditions = [FinancialTransaction.banca_id.in_(banca_ids)]
    if tipo:
        conditions.append(FinancialTransaction.tipo == tipo)
    if casa:
        conditions.append(FinancialTransaction.casa_de_aposta.icontains(casa, autoescape=True))
    inicio = parse_date(dataInicio)
    if inicio is not None:
        conditions.append(FinancialTransaction.data_transacao >= inicio)
    fim = parse_date(dataFim)
    if fim is not None:
        conditions.append(FinancialTransaction.data_transacao <= fim)

    rows = (
        await db.execute(
            select(FinancialTransaction).where(*conditions).order_by(FinancialTransaction.data_transacao.desc())
        )
    ).scalars().all()
    return [serialize_transacao(t, with_banca=True) for t in rows]


@router.get("/saldo-geral")
async def get_saldo_geral(user_id: str = CurrentUserDep, db: AsyncSession = DbDep, bancaId: Optional[str] = None):
    banca_ids = await _user_banca_ids(db, user_id)
    if bancaId:
        banca_ids = [b for b in banca_ids if b == bancaId]

    transacoes: list = []
    apostas: list = []
    if banca_ids:
        transacoes = list(
            (
                await db.execute(select(FinancialTransaction).where(FinancialTransaction.banca_id.in_(banca_ids)))
            ).scalars().all()
        )
        apostas = list((await db.execute(select(Bet).where(Bet.banca_id.in_(banca_ids)))).scalars().all())

    return saldo_geral(apostas, transacoes)
