from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, new_id, utcnow

"""
Model User.

Rôle (fonctionnel) :
- Représente un parieur (titulaire des bancas).
- Porte le plan courant (plano_id) et, pendant une promo, le plan d’origine + la date d’expiration.

Cycle promo :
- Activation : plano_id = plan promo, promo_original_plan_id = ancien plan, promo_expires_at = fin.
- Expiration : PlanFallbackManager remet plano_id sur le plan d’origine (ou le plan Free)
  et vide les deux champs promo.
"""


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    nome_completo: Mapped[str] = mapped_column("nomeCompleto", String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # Hash du mot de passe : jamais renvoyé par l’API
    senha: Mapped[str] = mapped_column(String(255), nullable=False)

    membro_desde: Mapped[datetime] = mapped_column("membroDesde", DateTime(timezone=True), nullable=False, default=utcnow)
    status_conta: Mapped[str] = mapped_column("statusConta", String(20), nullable=False, default="Ativa")

    # Plan courant (RESTRICT : un plan utilisé ne peut pas être supprimé)
    plano_id: Mapped[str] = mapped_column(
        "planoId",
        String(36),
        ForeignKey("plans.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Promo en cours (les deux champs sont posés/vidés ensemble)
    promo_original_plan_id: Mapped[str | None] = mapped_column("promoOriginalPlanId", String(36), nullable=True)
    promo_expires_at: Mapped[datetime | None] = mapped_column("promoExpiresAt", DateTime(timezone=True), nullable=True)

    # Identifiant de messagerie externe (bot Telegram)
    telegram_id: Mapped[str | None] = mapped_column("telegramId", String(32), nullable=True, unique=True)

    created_at: Mapped[datetime] = mapped_column("createdAt", DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    plano = relationship("Plan", lazy="joined")
