from types import SimpleNamespace

import pytest

from app.services.bet_calculations import (
    bankroll_metrics,
    bets_summary,
    calcular_resultado_aposta,
    is_aposta_concluida,
    is_aposta_ganha,
    saldo_geral,
    status_label,
)


def _bet(status: str, stake: float, retorno=None):
    return SimpleNamespace(status=status, valor_apostado=stake, retorno_obtido=retorno)


def _tx(tipo: str, valor: float):
    return SimpleNamespace(tipo=tipo, valor=valor)


@pytest.mark.parametrize(
    ("status", "stake", "retorno", "expected"),
    [
        ("Ganha", 100, 250, 150),
        ("Ganha", 100, None, 0),
        ("Cashout", 100, 80, -20),
        ("Perdida", 100, None, -100),
        ("Meio Ganha", 100, 150, 25),
        ("Meio Ganha", 100, None, -50),
        ("Meio Perdida", 100, None, -50),
        ("Reembolsada", 100, 100, 0),
        ("Void", 100, None, 0),
        ("Pendente", 100, None, 0),
        ("Qualquer", 100, 500, 0),
    ],
)
def test_calcular_resultado_aposta(status, stake, retorno, expected) -> None:
    assert calcular_resultado_aposta(status, stake, retorno) == expected


def test_status_helpers() -> None:
    assert is_aposta_concluida("Perdida")
    assert not is_aposta_concluida("Pendente")
    assert is_aposta_ganha("Meio Ganha")
    assert not is_aposta_ganha("Cashout")
    assert status_label("Ganha") == "GANHOU"
    assert status_label("Meio Perdida") == "PERDEU"
    assert status_label("Void") == "Void"


def test_bankroll_metrics() -> None:
    apostas = [_bet("Ganha", 100, 200), _bet("Perdida", 50), _bet("Pendente", 30)]
    transacoes = [_tx("Depósito", 1000), _tx("Depósito", 200), _tx("Saque", 150)]

    metricas = bankroll_metrics(apostas, transacoes)

    assert metricas["totalApostas"] == 3
    assert metricas["totalTransacoes"] == 3
    assert metricas["totalDepositado"] == 1200
    assert metricas["totalSacado"] == 150
    assert metricas["totalApostado"] == 180
    assert metricas["resultadoApostas"] == 50
    assert metricas["lucro"] == 50
    assert metricas["saldoAtual"] == 1100


def test_bankroll_metrics_empty() -> None:
    metricas = bankroll_metrics([], [])
    assert metricas["saldoAtual"] == 0
    assert metricas["totalApostas"] == 0


def test_bets_summary() -> None:
    apostas = [
        _bet("Ganha", 100, 190),
        _bet("Meio Ganha", 100, 150),
        _bet("Perdida", 100),
        _bet("Void", 100),
        _bet("Pendente", 100),
    ]

    resumo = bets_summary(apostas)

    assert resumo["totalApostas"] == 5
    assert resumo["totalInvestido"] == 500
    assert resumo["resultadoApostas"] == 15.0
    assert resumo["apostasConcluidas"] == 4
    assert resumo["apostasGanhas"] == 2
    assert resumo["taxaAcerto"] == 50.0
    assert resumo["apostasPendentes"] == 1
    assert resumo["apostasVoid"] == 1


def test_bets_summary_without_concluded_bets() -> None:
    assert bets_summary([_bet("Pendente", 10)])["taxaAcerto"] == 0.0


def test_saldo_geral_groups_by_casa() -> None:
    transacoes = [
        SimpleNamespace(tipo="Depósito", valor=300, casa_de_aposta="Bet365"),
        SimpleNamespace(tipo="Saque", valor=50, casa_de_aposta="Bet365"),
        SimpleNamespace(tipo="Depósito", valor=100, casa_de_aposta="Betano"),
    ]
    apostas = [
        SimpleNamespace(status="Perdida", valor_apostado=30, retorno_obtido=None, casa_de_aposta="Betano"),
        SimpleNamespace(status="Pendente", valor_apostado=20, retorno_obtido=None, casa_de_aposta="Betfair"),
    ]

    saldo = saldo_geral(apostas, transacoes)

    assert saldo["saldoAtual"] == 220
    assert (saldo["totalDepositos"], saldo["totalSaques"]) == (2, 1)
    assert (saldo["apostasPendentes"], saldo["valorApostasPendentes"], saldo["apostasConcluidas"]) == (1, 20, 1)
    assert saldo["porCasa"]["Bet365"]["saldo"] == 250
    assert saldo["porCasa"]["Betano"] == {"depositos": 100, "saques": 0, "saldo": 70, "apostas": 1, "resultado": -30}
    assert saldo["porCasa"]["Betfair"]["apostas"] == 1


def test_saldo_geral_empty() -> None:
    saldo = saldo_geral([], [])

    assert saldo["saldoAtual"] == 0
    assert saldo["porCasa"] == {}
