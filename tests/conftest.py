from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.rate_limit import bet_update_limiter
from app.core.security import create_access_token
from app.core.settings import settings
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models import Bankroll, Plan, User

TEST_SECRET = "test-secret-banca"


@pytest.fixture
def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'banca.db'}", poolclass=NullPool)

    async def _create() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create())
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def write_statements(engine):
    """Capture les INSERT / UPDATE / DELETE émis sur la base de test."""
    statements: list = []

    def _capture(conn, cursor, statement, parameters, context, executemany) -> None:
        if statement.lstrip().split(" ", 1)[0].upper() in ("INSERT", "UPDATE", "DELETE"):
            statements.append(statement)

    event.listen(engine.sync_engine, "before_cursor_execute", _capture)
    yield statements
    event.remove(engine.sync_engine, "before_cursor_execute", _capture)


@pytest.fixture
def jwt_secret(monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET", TEST_SECRET)
    return TEST_SECRET


@pytest.fixture
def client(session_factory, jwt_secret):
    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    bet_update_limiter.reset()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    bet_update_limiter.reset()


def run(coro):
    return asyncio.run(coro)


async def _add_all(factory, *objs: Any) -> None:
    async with factory() as session:
        session.add_all(objs)
        await session.commit()


def add_plan(factory, nome: str = "Free", limite: int = 0, preco: float = 0.0) -> str:
    plan = Plan(nome=nome, preco=preco, limite_apostas_diarias=limite)
    run(_add_all(factory, plan))
    return plan.id


def add_user(
    factory,
    plano_id: str,
    email: str = "joao@exemplo.com",
    promo_original_plan_id: Optional[str] = None,
    promo_expires_at: Optional[datetime] = None,
) -> str:
    user = User(
        nome_completo="João da Silva",
        email=email,
        senha="hash",
        plano_id=plano_id,
        promo_original_plan_id=promo_original_plan_id,
        promo_expires_at=promo_expires_at,
    )
    run(_add_all(factory, user))
    return user.id


def add_banca(factory, user_id: str, nome: str = "Principal", cor: str = "#ff0000") -> str:
    banca = Bankroll(usuario_id=user_id, nome=nome, cor=cor)
    run(_add_all(factory, banca))
    return banca.id


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, secret=TEST_SECRET)}"}


@pytest.fixture
def account(session_factory):
    """Plan Free illimité + 1 utilisateur : (user_id, plan_id)."""
    plan_id = add_plan(session_factory)
    user_id = add_user(session_factory, plan_id)
    return user_id, plan_id
