from __future__ import annotations

from datetime import datetime, timedelta, timezone

from conftest import add_banca, add_plan, add_user, auth_headers


def test_perfil_never_exposes_password(client, account) -> None:
    user_id, plan_id = account

    body = client.get("/perfil", headers=auth_headers(user_id)).json()

    assert body["id"] == user_id
    assert body["email"] == "joao@exemplo.com"
    assert "senha" not in body
    assert body["plano"]["id"] == plan_id


def test_unknown_user_is_404(client, account) -> None:
    response = client.get("/perfil", headers=auth_headers("fantasma"))
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Usuário não encontrado"


def test_perfil_reverts_expired_promo(client, session_factory) -> None:
    base = add_plan(session_factory, nome="Free", limite=10)
    promo = add_plan(session_factory, nome="Pro", limite=0, preco=29.9)
    user_id = add_user(
        session_factory,
        promo,
        promo_original_plan_id=base,
        promo_expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
    )

    body = client.get("/perfil", headers=auth_headers(user_id)).json()

    assert body["plano"]["nome"] == "Free"
    assert body["promoExpiresAt"] is None


def test_perfil_keeps_running_promo(client, session_factory) -> None:
    base = add_plan(session_factory, nome="Free", limite=10)
    promo = add_plan(session_factory, nome="Pro", limite=0)
    user_id = add_user(
        session_factory,
        promo,
        promo_original_plan_id=base,
        promo_expires_at=datetime.now(timezone.utc) + timedelta(days=3),
    )

    body = client.get("/perfil", headers=auth_headers(user_id)).json()

    assert body["plano"]["nome"] == "Pro"
    assert body["promoExpiresAt"] is not None


def test_planos_sorted_by_limit(client, session_factory, account) -> None:
    user_id, _ = account
    add_plan(session_factory, nome="Básico", limite=5)
    add_plan(session_factory, nome="Plus", limite=50)

    planos = client.get("/perfil/planos", headers=auth_headers(user_id)).json()

    assert [p["nome"] for p in planos] == ["Free", "Básico", "Plus"]


def test_consumo_counts_today_bets(client, session_factory) -> None:
    plan_id = add_plan(session_factory, nome="Básico", limite=4)
    user_id = add_user(session_factory, plan_id)
    banca_id = add_banca(session_factory, user_id)
    headers = auth_headers(user_id)
    client.post(
        "/apostas",
        json={
            "bancaId": banca_id,
            "esporte": "Tênis",
            "evento": "Alcaraz x Sinner",
            "mercado": "Vencedor",
            "tipoAposta": "Simples",
            "valorApostado": 10,
            "odd": 1.8,
            "dataEvento": "2026-06-01T14:00:00Z",
            "casaDeAposta": "Betano",
        },
        headers=headers,
    )

    body = client.get("/perfil/consumo", headers=headers).json()

    assert body["plano"] == {"nome": "Básico", "limiteDiario": 4}
    assert body["consumo"]["apostasHoje"] == 1
    assert body["consumo"]["limite"] == 4
    assert body["consumo"]["porcentagem"] == 25
    assert body["consumo"]["proximoReset"].endswith("+00:00")


def test_health(client) -> None:
    body = client.get("/health").json()
    assert body["status"] == "ok"


def test_system_status(client) -> None:
    response = client.get("/system/status")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["db"] == {"ok": True}
    assert body["last_update"] is None
