"""
app

Package racine de l’application backend Banca.

Rôle (fonctionnel) :
- Contient tout le code applicatif (API, logique métier, accès DB, schémas).
- Sert de point d’ancrage pour les imports : `from app...`

Organisation (haute-level) :
- app.api      : routes FastAPI (bancas, apostas, perfil, santé)
- app.core     : briques transverses (settings, errors, logs, sécurité JWT, événements, rate-limit…)
- app.db       : base SQLAlchemy + session async
- app.models   : modèles ORM (plans, users, bankrolls, bets, financial_transactions)
- app.schemas  : schémas Pydantic (entrées API)
- app.services : logique métier (calculs d’apostas, filtres, quota quotidien, plans)
"""
