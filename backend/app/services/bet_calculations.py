from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from app.models.financial_transaction import TIPO_DEPOSITO, TIPO_SAQUE

"""
Bet Calculations.

Rôle (fonctionnel) :
- Résultat financier d’une aposta selon son statut (lucro / prejuízo).
- Agrégats réutilisés par la liste des bancas (metricas), /apostas/resumo et /financeiro/saldo-geral.

Règles :
- Ganha / Cashout   : retorno - stake (0 si pas de retorno)
- Perdida           : -stake
- Meio Ganha        : (retorno - stake) / 2, ou -stake / 2 sans retorno
- Meio Perdida      : -stake / 2
- Reembolsada, Void, Pendente, inconnu : 0
"""

STATUS_PENDENTE = "Pendente"
STATUS_GANHAS = frozenset({"Ganha", "Meio Ganha"})
STATUS_PERDIDAS = frozenset({"Perdida", "Meio Perdida"})


def calcular_resultado_aposta(status: str, valor_apostado: float, retorno_obtido: Optional[float]) -> float:
    if status in ("Ganha", "Cashout"):
        return retorno_obtido - valor_apostado if retorno_obtido else 0.0
    if status == "Perdida":
        return -valor_apostado
    if status == "Meio Ganha":
        return (retorno_obtido - valor_apostado) / 2 if retorno_obtido else -valor_apostado / 2
    if status == "Meio Perdida":
        return -valor_apostado / 2
    return 0.0


def is_aposta_concluida(status: str) -> bool:
    return status != STATUS_PENDENTE


def is_aposta_ganha(status: str) -> bool:
    return status in STATUS_GANHAS


def resultado_total(apostas: Iterable[Any]) -> float:
    """Somme des résultats des apostas concluídas (objets avec status / valor_apostado / retorno_obtido)."""
    return sum(
        calcular_resultado_aposta(a.status, a.valor_apostado, a.retorno_obtido)
        for a in apostas
        if is_aposta_concluida(a.status)
    )


def bankroll_metrics(apostas: list, transacoes: list) -> Dict[str, Any]:
    """
    Metricas d’une banca.

    saldoAtual = total déposé - total retiré + résultat des apostas concluídas.
    """
    total_depositado = sum(t.valor for t in transacoes if t.tipo == TIPO_DEPOSITO)
    total_sacado = sum(t.valor for t in transacoes if t.tipo == TIPO_SAQUE)
    total_apostado = sum(a.valor_apostado for a in apostas)
    resultado = resultado_total(apostas)

    return {
        "totalApostas": len(apostas),
        "totalTransacoes": len(transacoes),
        "totalDepositado": total_depositado,
        "totalSacado": total_sacado,
        "saldoAtual": total_depositado - total_sacado + resultado,
        "totalApostado": total_apostado,
        "resultadoApostas": resultado,
        "lucro": resultado,
    }


def saldo_geral(apostas: list, transacoes: list) -> Dict[str, Any]:
    """
    Métriques financières consolidées (/financeiro/saldo-geral).

    porCasa : par casa de aposta, dépôts, retraits, nombre d’apostas, résultat et
    saldo (dépôts - retraits + résultat).
    """
    depositos = [t for t in transacoes if t.tipo == TIPO_DEPOSITO]
    saques = [t for t in transacoes if t.tipo == TIPO_SAQUE]
    pendentes = [a for a in apostas if a.status == STATUS_PENDENTE]
    concluidas = [a for a in apostas if is_aposta_concluida(a.status)]

    por_casa: Dict[str, Dict[str, float]] = {}

    def _casa(nome: str) -> Dict[str, float]:
        return por_casa.setdefault(nome, {"depositos": 0, "saques": 0, "saldo": 0, "apostas": 0, "resultado": 0})

    for t in depositos:
        _casa(t.casa_de_aposta)["depositos"] += t.valor
    for t in saques:
        _casa(t.casa_de_aposta)["saques"] += t.valor
    for a in apostas:
        _casa(a.casa_de_aposta)["apostas"] += 1
    for a in concluidas:
        resultado_aposta = calcular_resultado_aposta(a.status, a.valor_apostado, a.retorno_obtido)
        _casa(a.casa_de_aposta)["resultado"] += resultado_aposta
    for casa in por_casa.values():
        casa["saldo"] = casa["depositos"] - casa["saques"] + casa["resultado"]

    total_depositado = sum(t.valor for t in depositos)
    total_sacado = sum(t.valor for t in saques)
    resultado = resultado_total(apostas)

    return {
        "totalDepositado": total_depositado,
        "totalSacado": total_sacado,
        "saldoAtual": total_depositado - total_sacado + resultado,
        "totalTransacoes": len(transacoes),
        "totalDepositos": len(depositos),
        "totalSaques": len(saques),
        "resultadoApostas": resultado,
        "apostasPendentes": len(pendentes),
        "valorApostasPendentes": sum(a.valor_apostado for a in pendentes),
        "apostasConcluidas": len(concluidas),
        "porCasa": por_casa,
    }


def bets_summary(apostas: list) -> Dict[str, Any]:
    """Résumé global (/apostas/resumo) : volumes, résultat, taux de réussite en %."""
    concluidas = [a for a in apostas if is_aposta_concluida(a.status)]
    ganhas = [a for a in concluidas if is_aposta_ganha(a.status)]
    resultado = resultado_total(apostas)
    taxa = (len(ganhas) / len(concluidas)) * 100 if concluidas else 0.0

    return {
        "totalApostas": len(apostas),
        "totalInvestido": sum(a.valor_apostado for a in apostas),
        "resultadoApostas": round(resultado, 2),
        "taxaAcerto": round(taxa, 2),
        "apostasGanhas": len(ganhas),
        "apostasPerdidas": sum(1 for a in apostas if a.status == "Perdida"),
        "apostasPendentes": sum(1 for a in apostas if a.status == STATUS_PENDENTE),
        "apostasVoid": sum(1 for a in apostas if a.status == "Void"),
        "apostasConcluidas": len(concluidas),
    }


def status_label(status: str) -> str:
    """Libellé simplifié pour les cartes “apostas recentes”."""
    if status in STATUS_GANHAS:
        return "GANHOU"
    if status in STATUS_PERDIDAS:
        return "PERDEU"
    return status
