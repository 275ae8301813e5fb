"""Codes promo : table promo_code_redemptions.

Rôle (fonctionnel) :
- Trace les utilisations de codes promo (1 par utilisateur et par code).
- Index sur code pour le comptage du plafond global.

Revision ID: 9d17b3c5e2a4
Revises: 4c2e81d0a7f3
Create Date: 2026-10-19 16:40:05.118034
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Identifiants Alembic
revision: str = "9d17b3c5e2a4"
down_revision: Union[str, Sequence[str], None] = "4c2e81d0a7f3"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Application des changements de schéma."""
    op.create_table(
        "promo_code_redemptions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("userId", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("redeemedAt", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("code", "userId", name="uq_promo_code_redemptions_code_user"),
    )
    op.create_index("ix_promo_code_redemptions_code", "promo_code_redemptions", ["code"], unique=False)


def downgrade() -> None:
    """Retour arrière des changements de schéma."""
    op.drop_index("ix_promo_code_redemptions_code", table_name="promo_code_redemptions")
    op.drop_table("promo_code_redemptions")
