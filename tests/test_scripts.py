from __future__ import annotations

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from app.db.base import Base
from app.models import Plan
from scripts.add_cor_column import add_cor_sql
from scripts.update_plan_price import upsert_plan


@pytest.fixture
def db(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'scripts.db'}")
    Base.metadata.create_all(engine)
    with sessionmaker(bind=engine)() as session:
        yield session
    engine.dispose()


def test_upsert_plan_lifecycle(db) -> None:
    assert upsert_plan(db, "Profissional", 89.99, 0) == "created"
    assert upsert_plan(db, "Profissional", 89.99, 0) == "unchanged"
    assert upsert_plan(db, "Profissional", 99.9, 100) == "updated"

    plan = db.execute(select(Plan).where(Plan.nome == "Profissional")).scalar_one()
    assert plan.preco == 99.9
    assert plan.limite_apostas_diarias == 100


def test_add_cor_sql_is_idempotent() -> None:
    sql = add_cor_sql()
    assert "ADD COLUMN IF NOT EXISTS" in sql
    assert "'#2563eb'" in sql
