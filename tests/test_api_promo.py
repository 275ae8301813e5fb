from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select

from app.core.settings import settings
from app.models import PromoCodeRedemption
from app.services.plan_manager import PlanFallbackManager
from conftest import add_plan, add_user, auth_headers, run


def _redemptions(factory) -> int:
    async def _query():
        async with factory() as session:
            return (await session.execute(select(func.count(PromoCodeRedemption.id)))).scalar_one()

    return run(_query())


def _shift_clock(client, days: int) -> None:
    client.app.state.plan_manager = PlanFallbackManager(
        None,
        fallback_plan_name=settings.FALLBACK_PLAN_NAME,
        now=lambda: datetime.now(timezone.utc) + timedelta(days=days),
    )


def _setup(factory) -> tuple:
    free = add_plan(factory, nome="Free", limite=10)
    add_plan(factory, nome="Profissional", limite=0, preco=49.9)
    return free, add_user(factory, free)


def test_redeem_switches_to_promo_plan(client, session_factory) -> None:
    free, user_id = _setup(session_factory)

    response = client.post("/perfil/promo-code", json={"code": " REALTESTE "}, headers=auth_headers(user_id))

    assert response.status_code == 200
    body = response.json()
    assert body["remainingUses"] == settings.PROMO_USAGE_LIMIT - 1
    assert body["expiresAt"]
    assert body["profile"]["plano"]["nome"] == "Profissional"
    assert body["profile"]["promoExpiresAt"] is not None
    assert _redemptions(session_factory) == 1


def test_promo_reverts_after_expiry(client, session_factory) -> None:
    free, user_id = _setup(session_factory)
    headers = auth_headers(user_id)
    client.post("/perfil/promo-code", json={"code": "realteste"}, headers=headers)

    assert client.get("/perfil", headers=headers).json()["plano"]["nome"] == "Profissional"

    _shift_clock(client, settings.PROMO_DURATION_DAYS + 1)
    body = client.get("/perfil", headers=headers).json()

    assert body["plano"]["id"] == free
    assert body["promoExpiresAt"] is None


def test_promo_still_running_before_expiry(client, session_factory) -> None:
    _, user_id = _setup(session_factory)
    headers = auth_headers(user_id)
    client.post("/perfil/promo-code", json={"code": "realteste"}, headers=headers)

    _shift_clock(client, settings.PROMO_DURATION_DAYS - 1)
    body = client.get("/perfil", headers=headers).json()

    assert body["plano"]["nome"] == "Profissional"


def test_redeem_twice_is_rejected(client, session_factory) -> None:
    _, user_id = _setup(session_factory)
    headers = auth_headers(user_id)
    client.post("/perfil/promo-code", json={"code": "realteste"}, headers=headers)

    response = client.post("/perfil/promo-code", json={"code": "realteste"}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PROMO_ALREADY_USED"
    assert _redemptions(session_factory) == 1


def test_redeem_again_after_expiry_is_rejected(client, session_factory) -> None:
    _, user_id = _setup(session_factory)
    headers = auth_headers(user_id)
    client.post("/perfil/promo-code", json={"code": "realteste"}, headers=headers)
    _shift_clock(client, settings.PROMO_DURATION_DAYS + 1)

    response = client.post("/perfil/promo-code", json={"code": "realteste"}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PROMO_ALREADY_USED"
    assert client.get("/perfil", headers=headers).json()["plano"]["nome"] == "Free"


def test_wrong_code_is_400(client, session_factory) -> None:
    _, user_id = _setup(session_factory)

    response = client.post("/perfil/promo-code", json={"code": "outro"}, headers=auth_headers(user_id))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_PROMO_CODE"
    assert _redemptions(session_factory) == 0


def test_code_usage_limit_is_global(client, session_factory, monkeypatch) -> None:
    free, first = _setup(session_factory)
    second = add_user(session_factory, free, email="maria@exemplo.com")
    monkeypatch.setattr(settings, "PROMO_USAGE_LIMIT", 1)

    ok = client.post("/perfil/promo-code", json={"code": "realteste"}, headers=auth_headers(first))
    response = client.post("/perfil/promo-code", json={"code": "realteste"}, headers=auth_headers(second))

    assert ok.json()["remainingUses"] == 0
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PROMO_EXHAUSTED"
    assert client.get("/perfil", headers=auth_headers(second)).json()["plano"]["nome"] == "Free"


def test_missing_promo_plan_is_500(client, account) -> None:
    user_id, _ = account

    response = client.post("/perfil/promo-code", json={"code": "realteste"}, headers=auth_headers(user_id))

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "SERVER_MISCONFIG"


def test_short_code_is_validation_error(client, account) -> None:
    user_id, _ = account

    response = client.post("/perfil/promo-code", json={"code": "ab"}, headers=auth_headers(user_id))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_change_plan(client, session_factory, account) -> None:
    user_id, _ = account
    plus = add_plan(session_factory, nome="Plus", limite=50, preco=19.9)

    response = client.put("/perfil/plano", json={"planoId": plus}, headers=auth_headers(user_id))

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Plano atualizado para Plus"
    assert body["user"]["plano"]["id"] == plus
    assert client.get("/perfil", headers=auth_headers(user_id)).json()["plano"]["nome"] == "Plus"


def test_change_to_unknown_plan_is_404(client, account) -> None:
    user_id, _ = account

    response = client.put("/perfil/plano", json={"planoId": "nao-existe"}, headers=auth_headers(user_id))

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Plano não encontrado"


def test_change_plan_applies_expired_promo_first(client, session_factory) -> None:
    base = add_plan(session_factory, nome="Free", limite=10)
    promo = add_plan(session_factory, nome="Profissional", limite=0)
    plus = add_plan(session_factory, nome="Plus", limite=50)
    user_id = add_user(
        session_factory,
        promo,
        promo_original_plan_id=base,
        promo_expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
    )

    body = client.put("/perfil/plano", json={"planoId": plus}, headers=auth_headers(user_id)).json()

    assert body["user"]["plano"]["nome"] == "Plus"
    assert body["user"]["promoExpiresAt"] is None
