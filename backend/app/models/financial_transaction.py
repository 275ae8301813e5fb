from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, new_id, utcnow

"""
Model FinancialTransaction.

Rôle (fonctionnel) :
- Mouvement de capital d’une banca : Depósito ou Saque.
- Entre dans le calcul du saldo : déposé - retiré + résultat des apostas.
"""

TIPO_DEPOSITO = "Depósito"
TIPO_SAQUE = "Saque"


class FinancialTransaction(Base):
    __tablename__ = "financial_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    banca_id: Mapped[str] = mapped_column(
        "bancaId",
        String(36),
        ForeignKey("bankrolls.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    tipo: Mapped[str] = mapped_column(String(20), nullable=False)
    casa_de_aposta: Mapped[str] = mapped_column("casaDeAposta", String(100), nullable=False)
    valor: Mapped[float] = mapped_column(Float, nullable=False)
    data_transacao: Mapped[datetime] = mapped_column("dataTransacao", DateTime(timezone=True), nullable=False, default=utcnow)
    observacao: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column("createdAt", DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    banca = relationship("Bankroll", lazy="joined")
