"""
app.core

Package “cœur” de l’application : tout ce qui est transversal et ne dépend pas d’un domaine
métier précis (bancas, apostas, plans).

On y trouve :

- settings
  Configuration par variables d’environnement (.env) : DB, JWT, plan de repli, rate limit, stream.

- errors
  Format d’erreur API uniforme (code, message, details, request_id, timestamp), AppHTTPException
  et traduction des erreurs de validation / de la couche données en statut HTTP.

- logging
  Logs JSON sur stdout, enrichis du request_id courant.

- request_id
  Identifiant de corrélation par requête (header X-Request-Id + contextvar).

- security
  Authentification JWT : extraction du token (header, query, cookie) et dépendance require_user.

- events
  Bus publish/subscribe des événements d’apostas, consommé par le stream SSE.

- rate_limit
  Limitation de débit en mémoire par IP + route (PUT /apostas/{id}).
"""
