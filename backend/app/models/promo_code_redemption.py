from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, new_id, utcnow

"""
Model PromoCodeRedemption.

Rôle (fonctionnel) :
- Trace chaque utilisation d’un code promo (1 ligne par utilisateur et par code).
- Sert au plafond global d’utilisations (count par code).
"""


class PromoCodeRedemption(Base):
    __tablename__ = "promo_code_redemptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[str] = mapped_column(
        "userId",
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    redeemed_at: Mapped[datetime] = mapped_column("redeemedAt", DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        # 1 utilisation par utilisateur : un doublon concurrent finit en 409
        UniqueConstraint("code", "userId", name="uq_promo_code_redemptions_code_user"),
        Index("ix_promo_code_redemptions_code", "code"),
    )
