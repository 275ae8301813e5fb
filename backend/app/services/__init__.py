"""
app.services

Package “services” : logique applicative indépendante des endpoints HTTP.

Contenu :
- bankroll_fields : normalisation de la couleur + retrait de `cor` des réponses.
- bet_calculations : résultat d’une aposta, metricas de banca, résumé global.
- bet_filters : filtres de la liste d’apostas (requêtes SQLAlchemy).
- daily_limit : fenêtre et comptage du quota quotidien.
- plan_manager : retour au plan de repli à l’expiration d’une promo.

Principe :
- app.api = transport HTTP (routes, validation, dépendances)
- app.services = règles métier réutilisables et testables
"""
