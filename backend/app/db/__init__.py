"""
app.db

Package base de données : connexion, session et helpers d’accès DB.

Contenu :
- base : classe Base ORM + helpers (new_id, utcnow).
- session : engine async + AsyncSessionLocal + dépendance get_db().
- Les scripts d’admin et Alembic utilisent DATABASE_URL_SYNC (moteur sync).
"""
