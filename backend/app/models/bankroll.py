from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, new_id, utcnow

"""
Model Bankroll (“banca”).

Rôle (fonctionnel) :
- Capital de paris nommé, rattaché à un utilisateur.
- Une seule banca “padrão” (e_padrao) par utilisateur : garanti par les routes.

Champs :
- cor : tag couleur stocké en base, jamais exposé par l’API (voir sanitize_bankroll).
- Le saldo initial n’est pas une colonne : c’est un Depósito dans financial_transactions.
"""

DEFAULT_COLOR = "#2563eb"


class Bankroll(Base):
    __tablename__ = "bankrolls"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    usuario_id: Mapped[str] = mapped_column(
        "usuarioId",
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    nome: Mapped[str] = mapped_column(String(100), nullable=False)
    descricao: Mapped[str | None] = mapped_column(Text, nullable=True)
    cor: Mapped[str | None] = mapped_column(Text, nullable=True, default=DEFAULT_COLOR)

    # Ativa | Inativa
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Ativa")
    e_padrao: Mapped[bool] = mapped_column("ePadrao", Boolean, nullable=False, default=False)

    criado_em: Mapped[datetime] = mapped_column("criadoEm", DateTime(timezone=True), nullable=False, default=utcnow)
    created_at: Mapped[datetime] = mapped_column("createdAt", DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # Liste “mes bancas” : filtre par propriétaire + tri par date de création
    __table_args__ = (Index("ix_bankrolls_usuario_criado", "usuarioId", "criadoEm"),)
