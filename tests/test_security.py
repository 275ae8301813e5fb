from __future__ import annotations

from datetime import timedelta

import pytest
from jose import jwt
from starlette.requests import Request

from app.core.errors import AppHTTPException
from app.core.security import create_access_token, extract_token, require_user, verify_token
from conftest import TEST_SECRET, run


def _request(headers: dict | None = None, query: str = "") -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/bancas",
        "headers": raw_headers,
        "query_string": query.encode(),
        "client": ("127.0.0.1", 5000),
    }
    return Request(scope)


def test_extract_token_precedence() -> None:
    req = _request({"Authorization": "Bearer h", "Cookie": "access_token=c"}, query="token=q")
    assert extract_token(req) == "h"

    req = _request({"Cookie": "access_token=c"}, query="token=q")
    assert extract_token(req) == "q"

    req = _request({"Cookie": "access_token=c"})
    assert extract_token(req) == "c"

    assert extract_token(_request()) is None


def test_extract_token_ignores_non_bearer_header() -> None:
    assert extract_token(_request({"Authorization": "Basic abc"})) is None


def test_verify_token_reports_failure_kind() -> None:
    good = create_access_token("u1", secret=TEST_SECRET)
    assert verify_token(good, TEST_SECRET).claims["userId"] == "u1"
    assert verify_token(good, "other").failure == "invalid"
    assert verify_token("garbage", TEST_SECRET).failure == "invalid"

    expired = create_access_token("u1", secret=TEST_SECRET, expires_in=timedelta(seconds=-10))
    assert verify_token(expired, TEST_SECRET).failure == "expired"


def test_require_user_without_token_is_401(jwt_secret) -> None:
    with pytest.raises(AppHTTPException) as exc_info:
        run(require_user(_request()))
    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Token não fornecido"


def test_require_user_without_secret_is_500(monkeypatch) -> None:
    from app.core.settings import settings

    monkeypatch.setattr(settings, "JWT_SECRET", "")
    with pytest.raises(AppHTTPException) as exc_info:
        run(require_user(_request({"Authorization": "Bearer anything"})))
    assert exc_info.value.status_code == 500


def test_require_user_bad_token_is_403(jwt_secret) -> None:
    with pytest.raises(AppHTTPException) as exc_info:
        run(require_user(_request({"Authorization": "Bearer not-a-jwt"})))
    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Token inválido"


@pytest.mark.parametrize("source", ["header", "query", "cookie"])
def test_require_user_foreign_signature_is_403(jwt_secret, source) -> None:
    forged = create_access_token("u1", secret="other-secret")
    req = {
        "header": lambda: _request({"Authorization": f"Bearer {forged}"}),
        "query": lambda: _request(query=f"token={forged}"),
        "cookie": lambda: _request({"Cookie": f"access_token={forged}"}),
    }[source]()

    with pytest.raises(AppHTTPException) as exc_info:
        run(require_user(req))
    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Token inválido"
    assert not hasattr(req.state, "user_id")


def test_require_user_missing_claim_is_403(jwt_secret) -> None:
    token = jwt.encode({"sub": "u1"}, TEST_SECRET, algorithm="HS256")
    with pytest.raises(AppHTTPException) as exc_info:
        run(require_user(_request({"Authorization": f"Bearer {token}"})))
    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Token inválido: userId não encontrado"


def test_require_user_success_attaches_identity(jwt_secret) -> None:
    req = _request(query=f"token={create_access_token('user-42', secret=TEST_SECRET)}")

    assert run(require_user(req)) == "user-42"
    assert req.state.user_id == "user-42"
