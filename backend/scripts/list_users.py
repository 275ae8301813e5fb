# backend/scripts/list_users.py
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

# Permet de lancer le script depuis backend/ sans souci d'import
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))

from app.core.settings import settings
from app.models.bankroll import Bankroll
from app.models.bet import Bet
from app.models.user import User

"""
Script : liste des utilisateurs.

Rôle (fonctionnel) :
- Affiche chaque utilisateur avec son plan, l’état de sa promo et le volume de bancas / apostas.
- Lecture seule (aucune écriture en base).

Usage :
  python scripts/list_users.py
  python scripts/list_users.py --email joao@exemplo.com
"""


def format_limit(limit: int) -> str:
    return "Ilimitado" if limit <= 0 else f"{limit} apostas/dia"


def list_users(email: str | None = None) -> int:
    engine = create_engine(settings.DATABASE_URL_SYNC, pool_pre_ping=True)
    SessionLocal = sessionmaker(bind=engine)

    with SessionLocal() as db:
        stmt = select(User).order_by(User.nome_completo)
        if email:
            stmt = stmt.where(User.email == email)
        users = db.execute(stmt).scalars().all()

        if not users:
            print("Nenhum usuário encontrado.")
            return 0

        for index, user in enumerate(users, start=1):
            bancas = db.execute(
                select(func.count(Bankroll.id)).where(Bankroll.usuario_id == user.id)
            ).scalar_one()
            apostas = db.execute(
                select(func.count(Bet.id))
                .select_from(Bet)
                .join(Bankroll, Bankroll.id == Bet.banca_id)
                .where(Bankroll.usuario_id == user.id)
            ).scalar_one()

            print("=" * 70)
            print(f"  USUÁRIO {index}: {user.nome_completo}")
            print("=" * 70)
            print(f"  Email:        {user.email}")
            print(f"  ID:           {user.id}")
            print(f"  Status:       {user.status_conta}")
            print(f"  Membro desde: {user.membro_desde:%d/%m/%Y}")
            if user.plano is not None:
                print(f"  Plano:        {user.plano.nome} (R$ {user.plano.preco:.2f}, {format_limit(user.plano.limite_apostas_diarias)})")
            if user.promo_expires_at is not None:
                print(f"  Promo até:    {user.promo_expires_at:%d/%m/%Y %H:%M} (plano de origem: {user.promo_original_plan_id or '-'})")
            if user.telegram_id:
                print(f"  Telegram ID:  {user.telegram_id}")
            print(f"  Bancas: {bancas} | Apostas: {apostas}")

        print(f"\nTotal: {len(users)} usuário(s)")
        return len(users)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--email", default=None, help="Filtre sur un email précis")
    args = parser.parse_args()

    list_users(email=args.email)


if __name__ == "__main__":
    main()
