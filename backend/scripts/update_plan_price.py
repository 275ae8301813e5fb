# backend/scripts/update_plan_price.py
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

# Permet de lancer le script depuis backend/ sans souci d'import
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))

from app.core.settings import settings
from app.models.plan import Plan

"""
Script : création / mise à jour d’un plan.

Rôle (fonctionnel) :
- Crée le plan s’il n’existe pas, sinon met à jour prix et limite quotidienne.
- Sans effet si le plan est déjà dans l’état demandé.

Note :
- Renommer le plan de repli (FALLBACK_PLAN_NAME) impose un redémarrage de l’API
  (ou un TTL via FALLBACK_PLAN_CACHE_TTL_S) : l’id résolu est mis en cache.

Usage :
  python scripts/update_plan_price.py --nome Profissional --preco 89.99 --limite 0
"""


def upsert_plan(db: Session, nome: str, preco: float, limite: int) -> str:
    """Renvoie "created", "updated" ou "unchanged"."""
    plan = db.execute(select(Plan).where(Plan.nome == nome)).scalar_one_or_none()

    if plan is None:
        db.add(Plan(nome=nome, preco=preco, limite_apostas_diarias=limite))
        db.commit()
        return "created"

    if plan.preco == preco and plan.limite_apostas_diarias == limite:
        return "unchanged"

    plan.preco = preco
    plan.limite_apostas_diarias = limite
    db.commit()
    return "updated"


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--nome", default="Profissional", help="Nom du plan")
    parser.add_argument("--preco", type=float, default=89.99, help="Prix mensuel (R$)")
    parser.add_argument("--limite", type=int, default=0, help="Apostas par jour (0 = illimité)")
    args = parser.parse_args()

    if args.preco < 0 or args.limite < 0:
        parser.error("preco et limite doivent être >= 0")

    engine = create_engine(settings.DATABASE_URL_SYNC, pool_pre_ping=True)
    SessionLocal = sessionmaker(bind=engine)

    with SessionLocal() as db:
        outcome = upsert_plan(db, args.nome, args.preco, args.limite)

    messages = {
        "created": f"✅ Plano {args.nome} criado (R$ {args.preco:.2f}, limite {args.limite})",
        "updated": f"✅ Plano {args.nome} atualizado (R$ {args.preco:.2f}, limite {args.limite})",
        "unchanged": f"ℹ️  Plano {args.nome} já está configurado com esses valores.",
    }
    print(messages[outcome])


if __name__ == "__main__":
    main()
