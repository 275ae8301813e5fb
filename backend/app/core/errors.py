from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

"""
Core Errors.

Rôle (fonctionnel) :
- Standardise le format des erreurs renvoyées par l’API (payload homogène).
- Fournit une exception applicative (AppHTTPException) pour lever des erreurs métier de façon cohérente.
- Point unique de traduction “exception -> HTTP” (map_error / error_response), utilisé par
  tous les exception handlers de main.py.

Politique de traduction (dans l’ordre) :
1. Erreur de validation (Pydantic / FastAPI)       -> 400 + liste des problèmes par champ
2. Clé dupliquée côté data layer (P2002 / 23505)   -> 409
3. Enregistrement introuvable (P2025 / NoResultFound) -> 404
4. Sinon : status_code propre à l’erreur (sinon 500) + message explicite (sinon message générique)

Convention de réponse (exemple) :
{
  "error": {
    "code": "DUPLICATE",
    "message": "Registro duplicado",
    "status": 409,
    "request_id": "...",
    "timestamp": "...",
    "details": [...]
  }
}
"""

log = logging.getLogger("app.errors")

# Codes data layer (compat Prisma + SQLSTATE Postgres)
DUPLICATE_KEY_CODES = frozenset({"P2002", "23505"})
NOT_FOUND_CODES = frozenset({"P2025"})

GENERIC_ERROR_MESSAGE = "Erro interno do servidor"


class UTF8JSONResponse(JSONResponse):
    """Réponse JSON avec charset UTF-8 explicite (cohérent sur tous les endpoints)."""
    media_type = "application/json; charset=utf-8"


def now_iso() -> str:
    """Timestamp ISO-8601 en UTC (utilisé dans toutes les erreurs)."""
    return datetime.now(timezone.utc).isoformat()


def error_payload(
    *,
    code: str,
    message: str,
    status: int,
    request_id: str,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    """Construit un payload d’erreur homogène pour l’API."""
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "status": status,
            "request_id": request_id,
            "timestamp": now_iso(),
        }
    }
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppHTTPException(HTTPException):
    """
    Exception applicative standardisée.

    Usage :
    - Lever une erreur “métier” avec un code stable et un message explicite.
    - Laisser la couche API/handlers produire une réponse cohérente.

    Exemple :
        raise AppHTTPException(404, "NOT_FOUND", "Banca não encontrada")
    """

    def __init__(self, status_code: int, code: str, message: str, details: Any = None):
        super().__init__(status_code=status_code, detail={"code": code, "message": message, "details": details})

    @property
    def message(self) -> str:
        return str(self.detail.get("message", ""))


@dataclass(frozen=True)
class MappedError:
    """Résultat de la traduction d’une exception (status + contenu du payload)."""
    status: int
    code: str
    message: str
    details: Optional[Any] = None


def _loc_to_path(loc: Sequence[Any]) -> str:
    # FastAPI préfixe la localisation par la source ("body", "query"...)
    parts = list(loc)
    if parts and parts[0] in ("body", "query", "path", "header", "cookie"):
        parts = parts[1:]
    return ".".join(str(p) for p in parts)


def validation_issues(exc: ValidationError | RequestValidationError) -> List[Dict[str, str]]:
    """Liste sérialisable des problèmes de validation (1 entrée par champ en erreur)."""
    issues: List[Dict[str, str]] = []
    for err in exc.errors():
        issues.append(
            {
                "path": _loc_to_path(err.get("loc", ())),
                "message": str(err.get("msg", "")),
                "type": str(err.get("type", "")),
            }
        )
    return issues


def _data_layer_code(exc: BaseException) -> Optional[str]:
    """Extrait un code data layer exploitable (Prisma-like, SQLSTATE, ou None)."""
    if isinstance(exc, IntegrityError):
        orig = exc.orig
        sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if sqlstate:
            return str(sqlstate)
        # SQLite (tests / dev local) : pas de SQLSTATE, seulement le message
        if "UNIQUE constraint failed" in str(orig):
            return "23505"
        return None

    # Les exceptions SQLAlchemy portent un `code` de doc (ex: "gkpj") : ignoré
    if isinstance(exc, StarletteHTTPException):
        return None
    code = getattr(exc, "code", None)
    if isinstance(code, str) and (code in DUPLICATE_KEY_CODES or code in NOT_FOUND_CODES):
        return code
    return None


def map_error(exc: BaseException) -> MappedError:
    """Traduit n’importe quelle exception en (status, code, message, details)."""
    if isinstance(exc, (ValidationError, RequestValidationError)):
        return MappedError(400, "VALIDATION_ERROR", "Dados inválidos", validation_issues(exc))

    if isinstance(exc, NoResultFound):
        return MappedError(404, "NOT_FOUND", "Registro não encontrado")

    code = _data_layer_code(exc)
    if code in DUPLICATE_KEY_CODES:
        return MappedError(409, "DUPLICATE", "Registro duplicado")
    if code in NOT_FOUND_CODES:
        return MappedError(404, "NOT_FOUND", "Registro não encontrado")

    if isinstance(exc, StarletteHTTPException):
        if isinstance(exc.detail, dict):
            return MappedError(
                exc.status_code,
                str(exc.detail.get("code", "HTTP_ERROR")),
                str(exc.detail.get("message") or GENERIC_ERROR_MESSAGE),
                exc.detail.get("details", None),
            )
        default_code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
        return MappedError(exc.status_code, default_code, str(exc.detail or GENERIC_ERROR_MESSAGE))

    status = getattr(exc, "status_code", None)
    if not isinstance(status, int) or not (400 <= status <= 599):
        status = 500

    # Seul un champ `message` explicite est exposé (jamais str(exc) : pas de fuite interne)
    message = getattr(exc, "message", None)
    if not isinstance(message, str) or not message:
        message = GENERIC_ERROR_MESSAGE

    return MappedError(status, "INTERNAL_ERROR" if status == 500 else "HTTP_ERROR", message)


def error_response(exc: BaseException, request_id: str) -> UTF8JSONResponse:
    """Produit exactement une réponse JSON standard pour une exception."""
    mapped = map_error(exc)
    if mapped.status >= 500:
        log.error("Unhandled error: %s", type(exc).__name__, exc_info=exc)

    return UTF8JSONResponse(
        status_code=mapped.status,
        content=error_payload(
            code=mapped.code,
            message=mapped.message,
            status=mapped.status,
            request_id=request_id,
            details=mapped.details,
        ),
    )
