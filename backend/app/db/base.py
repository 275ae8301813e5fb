from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase

"""
DB Base.

Rôle (fonctionnel) :
- Définit la classe Base SQLAlchemy commune à tous les modèles ORM (plans, users, bankrolls, bets…).
- Sert de point d’ancrage pour la metadata (Alembic autogenerate, create_all en test).
- Fournit les helpers de valeurs par défaut partagés par les modèles.

Note :
- Les identifiants sont des UUID stockés en texte (compat avec le schéma existant, colonnes TEXT).
"""


class Base(DeclarativeBase):
    """Classe racine ORM (SQLAlchemy Declarative)."""
    pass


def new_id() -> str:
    """Identifiant texte (UUID4) utilisé comme clé primaire."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
