# backend/scripts/add_cor_column.py
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sqlalchemy import create_engine, text

# Permet de lancer le script depuis backend/ sans souci d'import
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))

from app.core.settings import settings
from app.models.bankroll import DEFAULT_COLOR

"""
Script : ajout de la colonne bankrolls.cor.

Rôle (fonctionnel) :
- Met à niveau une base antérieure à la colonne "cor" (idempotent : IF NOT EXISTS).
- La couleur reste une donnée interne : l’API ne l’expose jamais.

Usage :
  python scripts/add_cor_column.py
  python scripts/add_cor_column.py --dry-run
"""


def add_cor_sql(default_color: str = DEFAULT_COLOR) -> str:
    # La valeur par défaut est une constante du code, jamais une saisie utilisateur
    return f"ALTER TABLE \"bankrolls\" ADD COLUMN IF NOT EXISTS \"cor\" TEXT DEFAULT '{default_color}'"


def add_cor_column(dry_run: bool = False) -> None:
    sql = add_cor_sql()
    if dry_run:
        print(sql)
        return

    print('> Adicionando coluna "cor" à tabela bankrolls...')
    engine = create_engine(settings.DATABASE_URL_SYNC, pool_pre_ping=True)
    with engine.begin() as conn:
        conn.execute(text(sql))
    print('✅ Coluna "cor" disponível na tabela bankrolls')


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--dry-run", action="store_true", help="Affiche le SQL sans l’exécuter")
    args = parser.parse_args()

    add_cor_column(dry_run=args.dry_run)


if __name__ == "__main__":
    main()
