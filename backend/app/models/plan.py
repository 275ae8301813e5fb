from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, new_id, utcnow

"""
Model Plan.

Rôle (fonctionnel) :
- Représente une offre d’abonnement (Free, Profissional…).
- Porte le prix et la limite quotidienne d’apostas (0 = illimité).

Contraintes :
- nome unique : le plan de repli est résolu par son nom (FALLBACK_PLAN_NAME).
"""


class Plan(Base):
    __tablename__ = "plans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    nome: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    preco: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    # Limite d’apostas par jour (reset à minuit) ; 0 = illimité
    limite_apostas_diarias: Mapped[int] = mapped_column("limiteApostasDiarias", Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column("createdAt", DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    @property
    def ilimitado(self) -> bool:
        return self.limite_apostas_diarias <= 0
