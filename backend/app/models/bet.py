from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, new_id, utcnow

"""
Model Bet (“aposta”).

Rôle (fonctionnel) :
- Pari enregistré dans une banca : mise (valor_apostado), cote (odd), bonus, retour obtenu.
- Le statut (Pendente, Ganha, Perdida, Meio Ganha, Meio Perdida, Cashout, Reembolsada, Void)
  pilote le calcul du résultat (services/bet_calculations.py).

Compat :
- Les colonnes historiques s’appellent jogo / dataJogo ; l’API les expose en evento / dataEvento.
"""


class Bet(Base):
    __tablename__ = "bets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    banca_id: Mapped[str] = mapped_column(
        "bancaId",
        String(36),
        ForeignKey("bankrolls.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    esporte: Mapped[str] = mapped_column(String(100), nullable=False)
    jogo: Mapped[str] = mapped_column(String(200), nullable=False)
    torneio: Mapped[str | None] = mapped_column(String(200), nullable=True)
    pais: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mercado: Mapped[str] = mapped_column(Text, nullable=False)
    tipo_aposta: Mapped[str] = mapped_column("tipoAposta", String(100), nullable=False)

    valor_apostado: Mapped[float] = mapped_column("valorApostado", Float, nullable=False)
    odd: Mapped[float] = mapped_column(Float, nullable=False)
    bonus: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    data_jogo: Mapped[datetime] = mapped_column("dataJogo", DateTime(timezone=True), nullable=False)
    tipster: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Pendente")
    casa_de_aposta: Mapped[str] = mapped_column("casaDeAposta", String(100), nullable=False)
    retorno_obtido: Mapped[float | None] = mapped_column("retornoObtido", Float, nullable=True)

    # Description détaillée (ticket importé / saisie libre)
    aposta: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column("createdAt", DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # Nom de la banca affiché dans les listes (chargement joint)
    banca = relationship("Bankroll", lazy="joined")

    # Limite quotidienne : comptage des apostas du jour ; listes triées par date de jeu
    __table_args__ = (
        Index("ix_bets_created_at", "createdAt"),
        Index("ix_bets_banca_data_jogo", "bancaId", "dataJogo"),
    )
