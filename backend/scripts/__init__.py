"""
scripts

Package utilitaire pour les scripts d’administration (exécution manuelle).

Rôle (fonctionnel) :
- list_users        : inventaire des utilisateurs (plan, promo, volumes).
- add_cor_column    : mise à niveau du schéma (colonne bankrolls.cor).
- update_plan_price : création / mise à jour d’un plan.

Note :
- Les scripts utilisent l’URL synchrone (DATABASE_URL_SYNC) et réutilisent les modèles de `app/`.
"""
