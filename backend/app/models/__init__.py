"""
app.models

Package ORM (SQLAlchemy) : définition des entités persistées en base.

Rôle (fonctionnel) :
- Centralise les modèles de l’application (Plan, User, Bankroll, Bet, FinancialTransaction, PromoCodeRedemption).
- Permet des imports plus simples depuis app.models (ex: from app.models import Bankroll).
- Importer ce package enregistre toutes les tables dans Base.metadata (Alembic, tests).
"""

from app.models.plan import Plan
from app.models.user import User
from app.models.bankroll import Bankroll
from app.models.bet import Bet
from app.models.financial_transaction import FinancialTransaction
from app.models.promo_code_redemption import PromoCodeRedemption

__all__ = ["Plan", "User", "Bankroll", "Bet", "FinancialTransaction", "PromoCodeRedemption"]
