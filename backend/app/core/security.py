from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Sequence

from fastapi import Request
from jose import ExpiredSignatureError, JWTError, jwt

from app.core.errors import AppHTTPException
from app.core.settings import settings

"""
Core Security (JWT).

Rôle (fonctionnel) :
- Authentifie les requêtes via un token JWT (HS256 par défaut, secret JWT_SECRET).
- Le token est cherché, dans l’ordre :
  - Authorization: Bearer <token>
  - paramètre de query ?token=<token> (EventSource ne sait pas envoyer de header)
  - cookie httpOnly ACCESS_TOKEN_COOKIE (défaut : access_token)

Comportement (require_user) :
- Aucun token                      -> 401 "Token não fornecido"
- JWT_SECRET non configuré         -> 500 (aucune vérification tentée)
- Signature / format / expiration  -> 403 "Token inválido"
- Claim userId absent              -> 403 "Token inválido: userId não encontrado"
- Succès : request.state.user_id = userId, la requête continue.

Notes :
- verify_token() ne lève pas : il renvoie un TokenVerification (claims OU failure).
- Le 500 sur secret manquant est conservé tel quel (voir DESIGN.md) plutôt qu’un refus au démarrage.
"""

log = logging.getLogger("app.auth")

USER_ID_CLAIM = "userId"


@dataclass(frozen=True)
class TokenVerification:
    """Issue d’une vérification : claims si valide, sinon le type d’échec ("invalid" / "expired")."""
    claims: Dict[str, Any] = field(default_factory=dict)
    failure: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _bearer(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    parts = value.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1].strip() or None
    return None


def extract_token(request: Request) -> Optional[str]:
    """Extrait le token : header Authorization, puis query ?token=, puis cookie."""
    token = _bearer(request.headers.get("authorization"))
    if token:
        return token

    token = (request.query_params.get("token") or "").strip()
    if token:
        return token

    token = (request.cookies.get(settings.ACCESS_TOKEN_COOKIE) or "").strip()
    if token:
        return token

    return None


def verify_token(token: str, secret: str, algorithms: Sequence[str] | None = None) -> TokenVerification:
    """Vérifie signature + expiration. Ne lève jamais : l’échec est porté par `failure`."""
    try:
        claims = jwt.decode(token, secret, algorithms=list(algorithms or [settings.JWT_ALGORITHM]))
    except ExpiredSignatureError:
        return TokenVerification(failure="expired")
    except JWTError:
        return TokenVerification(failure="invalid")
    return TokenVerification(claims=claims)


def create_access_token(
    user_id: str,
    *,
    expires_in: timedelta = timedelta(days=7),
    secret: str | None = None,
    extra_claims: Dict[str, Any] | None = None,
) -> str:
    """Émet un token signé portant le claim userId (scripts d’admin, tests)."""
    now = datetime.now(timezone.utc)
    claims: Dict[str, Any] = {USER_ID_CLAIM: user_id, "iat": now, "exp": now + expires_in}
    if extra_claims:
        claims.update(extra_claims)
    return jwt.encode(claims, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


async def require_user(request: Request) -> str:
    """
    Dépendance FastAPI : authentifie la requête et renvoie le userId.

    Ne retourne rien d’autre et n’écrit aucune réponse en cas de succès :
    lève AppHTTPException sinon.
    """
    token = extract_token(request)
    if not token:
        log.warning("auth_missing_token", extra={"path": request.url.path})
        raise AppHTTPException(401, "UNAUTHORIZED", "Token não fornecido")

    secret = settings.JWT_SECRET
    if not secret:
        raise AppHTTPException(500, "SERVER_MISCONFIG", "JWT_SECRET não configurado")

    result = verify_token(token, secret)
    if not result.ok:
        log.warning("auth_invalid_token", extra={"path": request.url.path, "event_type": result.failure})
        raise AppHTTPException(403, "FORBIDDEN", "Token inválido")

    user_id = result.claims.get(USER_ID_CLAIM)
    if not user_id:
        raise AppHTTPException(403, "FORBIDDEN", "Token inválido: userId não encontrado")

    request.state.user_id = str(user_id)
    return str(user_id)
