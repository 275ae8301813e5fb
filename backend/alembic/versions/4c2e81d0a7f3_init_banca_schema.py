"""Schéma initial banca.

Rôle (fonctionnel) :
- Crée les tables plans, users, bankrolls, bets et financial_transactions.
- Les noms de colonnes reprennent le schéma existant (camelCase : usuarioId, dataJogo…).
- Insère le plan de repli "Free" (10 apostas par jour).

Revision ID: 4c2e81d0a7f3
Revises:
Create Date: 2026-10-19 10:12:31.482210
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Identifiants Alembic
revision: str = "4c2e81d0a7f3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updatedAt", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Application des changements de schéma."""
    op.create_table(
        "plans",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("nome", sa.String(length=100), nullable=False, unique=True),
        sa.Column("preco", sa.Float(), nullable=False, server_default="0"),
        sa.Column("limiteApostasDiarias", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("nomeCompleto", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("senha", sa.String(length=255), nullable=False),
        sa.Column("membroDesde", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("statusConta", sa.String(length=20), nullable=False, server_default="Ativa"),
        sa.Column("planoId", sa.String(length=36), sa.ForeignKey("plans.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("promoOriginalPlanId", sa.String(length=36), nullable=True),
        sa.Column("promoExpiresAt", sa.DateTime(timezone=True), nullable=True),
        sa.Column("telegramId", sa.String(length=32), nullable=True, unique=True),
        *_timestamps(),
    )
    op.create_index(op.f("ix_users_planoId"), "users", ["planoId"], unique=False)

    op.create_table(
        "bankrolls",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("usuarioId", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("nome", sa.String(length=100), nullable=False),
        sa.Column("descricao", sa.Text(), nullable=True),
        sa.Column("cor", sa.Text(), nullable=True, server_default="#2563eb"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Ativa"),
        sa.Column("ePadrao", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("criadoEm", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
    )
    op.create_index("ix_bankrolls_usuario_criado", "bankrolls", ["usuarioId", "criadoEm"], unique=False)

    op.create_table(
        "bets",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("bancaId", sa.String(length=36), sa.ForeignKey("bankrolls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("esporte", sa.String(length=100), nullable=False),
        sa.Column("jogo", sa.String(length=200), nullable=False),
        sa.Column("torneio", sa.String(length=200), nullable=True),
        sa.Column("pais", sa.String(length=100), nullable=True),
        sa.Column("mercado", sa.Text(), nullable=False),
        sa.Column("tipoAposta", sa.String(length=100), nullable=False),
        sa.Column("valorApostado", sa.Float(), nullable=False),
        sa.Column("odd", sa.Float(), nullable=False),
        sa.Column("bonus", sa.Float(), nullable=False, server_default="0"),
        sa.Column("dataJogo", sa.DateTime(timezone=True), nullable=False),
        sa.Column("tipster", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="Pendente"),
        sa.Column("casaDeAposta", sa.String(length=100), nullable=False),
        sa.Column("retornoObtido", sa.Float(), nullable=True),
        sa.Column("aposta", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f("ix_bets_bancaId"), "bets", ["bancaId"], unique=False)
    op.create_index("ix_bets_created_at", "bets", ["createdAt"], unique=False)
    op.create_index("ix_bets_banca_data_jogo", "bets", ["bancaId", "dataJogo"], unique=False)

    op.create_table(
        "financial_transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("bancaId", sa.String(length=36), sa.ForeignKey("bankrolls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tipo", sa.String(length=20), nullable=False),
        sa.Column("casaDeAposta", sa.String(length=100), nullable=False),
        sa.Column("valor", sa.Float(), nullable=False),
        sa.Column("dataTransacao", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("observacao", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f("ix_financial_transactions_bancaId"), "financial_transactions", ["bancaId"], unique=False)

    # Plan de repli (FALLBACK_PLAN_NAME par défaut)
    op.execute(
        "INSERT INTO plans (id, nome, preco, \"limiteApostasDiarias\") "
        "VALUES ('00000000-0000-4000-8000-000000000001', 'Free', 0, 10)"
    )


def downgrade() -> None:
    """Retour arrière des changements de schéma."""
    op.drop_index(op.f("ix_financial_transactions_bancaId"), table_name="financial_transactions")
    op.drop_table("financial_transactions")
    op.drop_index("ix_bets_banca_data_jogo", table_name="bets")
    op.drop_index("ix_bets_created_at", table_name="bets")
    op.drop_index(op.f("ix_bets_bancaId"), table_name="bets")
    op.drop_table("bets")
    op.drop_index("ix_bankrolls_usuario_criado", table_name="bankrolls")
    op.drop_table("bankrolls")
    op.drop_index(op.f("ix_users_planoId"), table_name="users")
    op.drop_table("users")
    op.drop_table("plans")
