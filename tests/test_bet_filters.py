from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select

from app.models import Bet
from app.services.bet_filters import BetFilters, build_bet_conditions, parse_date, parse_positive_odd
from conftest import add_banca, add_plan, add_user, run


def _bet(banca_id: str, jogo: str, **overrides) -> Bet:
    values = dict(
        banca_id=banca_id,
        esporte="Futebol",
        jogo=jogo,
        mercado="Resultado final",
        tipo_aposta="Simples",
        valor_apostado=10.0,
        odd=2.0,
        data_jogo=datetime(2026, 3, 10, 20, 0, tzinfo=timezone.utc),
        casa_de_aposta="Bet365",
        status="Pendente",
    )
    values.update(overrides)
    return Bet(**values)


def _seed(factory):
    user_id = add_user(factory, add_plan(factory))
    banca_id = add_banca(factory, user_id)
    other_banca = add_banca(factory, user_id, nome="Outra")

    async def _insert() -> None:
        async with factory() as session:
            session.add_all(
                [
                    _bet(banca_id, "Flamengo x Palmeiras", odd=1.5, tipster="Carlos"),
                    _bet(
                        banca_id,
                        "Lakers x Celtics",
                        esporte="Basquete",
                        odd=3.2,
                        casa_de_aposta="Betano",
                        status="Ganha",
                        data_jogo=datetime(2026, 4, 1, tzinfo=timezone.utc),
                    ),
                    _bet(banca_id, "Santos x Grêmio", torneio="Copa do Brasil", odd=2.4),
                    _bet(other_banca, "Inter x Bahia"),
                ]
            )
            await session.commit()

    run(_insert())
    return banca_id


def _jogos(factory, filters: BetFilters) -> set:
    async def _query():
        async with factory() as session:
            rows = await session.execute(select(Bet.jogo).where(*build_bet_conditions(filters)))
            return set(rows.scalars().all())

    return run(_query())


def test_parse_helpers() -> None:
    assert parse_date("2026-03-10T20:00:00Z") == datetime(2026, 3, 10, 20, tzinfo=timezone.utc)
    assert parse_date("2026-03-10") == datetime(2026, 3, 10, tzinfo=timezone.utc)
    assert parse_date("ontem") is None
    assert parse_positive_odd("1.8") == 1.8
    assert parse_positive_odd("0") is None
    assert parse_positive_odd("abc") is None
    assert parse_positive_odd("nan") is None


def test_bancas_restrict_results(session_factory) -> None:
    banca_id = _seed(session_factory)
    assert _jogos(session_factory, BetFilters(banca_ids=[banca_id])) == {
        "Flamengo x Palmeiras",
        "Lakers x Celtics",
        "Santos x Grêmio",
    }


def test_text_filters_are_case_insensitive_contains(session_factory) -> None:
    banca_id = _seed(session_factory)

    assert _jogos(session_factory, BetFilters(banca_ids=[banca_id], esporte="basq")) == {"Lakers x Celtics"}
    assert _jogos(session_factory, BetFilters(banca_ids=[banca_id], casa="BETANO")) == {"Lakers x Celtics"}
    assert _jogos(session_factory, BetFilters(banca_ids=[banca_id], tipster="carl")) == {"Flamengo x Palmeiras"}


def test_status_is_exact(session_factory) -> None:
    banca_id = _seed(session_factory)
    assert _jogos(session_factory, BetFilters(banca_ids=[banca_id], status="Ganha")) == {"Lakers x Celtics"}
    assert _jogos(session_factory, BetFilters(banca_ids=[banca_id], status="Gan")) == set()


def test_odd_range_ignores_invalid_bounds(session_factory) -> None:
    banca_id = _seed(session_factory)

    assert _jogos(session_factory, BetFilters(banca_ids=[banca_id], odd_min="2", odd_max="3")) == {"Santos x Grêmio"}
    assert len(_jogos(session_factory, BetFilters(banca_ids=[banca_id], odd_min="-1", odd_max="x"))) == 3


def test_date_range(session_factory) -> None:
    banca_id = _seed(session_factory)
    filters = BetFilters(banca_ids=[banca_id], data_inicio="2026-03-15", data_fim="2026-04-30")
    assert _jogos(session_factory, filters) == {"Lakers x Celtics"}


def test_evento_searches_several_columns(session_factory) -> None:
    banca_id = _seed(session_factory)

    assert _jogos(session_factory, BetFilters(banca_ids=[banca_id], evento="copa do")) == {"Santos x Grêmio"}
    assert _jogos(session_factory, BetFilters(banca_ids=[banca_id], evento="celtics")) == {"Lakers x Celtics"}
    assert len(_jogos(session_factory, BetFilters(banca_ids=[banca_id], evento="resultado"))) == 3
