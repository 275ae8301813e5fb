from __future__ import annotations

import uuid
from contextvars import ContextVar

"""
Core Request ID.

Rôle (fonctionnel) :
- Garde l’identifiant de la requête HTTP courante dans un ContextVar.
- Sert de clé de corrélation entre la ligne de log “request”, les logs métier
  (bancas, apostas, plans) et le payload d’erreur renvoyé au client.

Sources :
- header entrant X-Request-Id (front / proxy),
- sinon UUID généré par le middleware d’observabilité (main.py).
"""

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(rid: str | None) -> None:
    """Force la valeur du request_id pour le contexte courant (None = reset)."""
    _request_id.set(rid)


def get_request_id() -> str | None:
    return _request_id.get()


def ensure_request_id(incoming: str | None = None) -> str:
    """
    Garantit un request_id pour le contexte courant.

    Un header entrant vide ou composé d’espaces est ignoré : on génère alors un UUID.
    """
    rid = (incoming or "").strip() or str(uuid.uuid4())
    set_request_id(rid)
    return rid


def current_request_id() -> str:
    """request_id courant, ou un UUID neuf hors requête (scripts, tests)."""
    return get_request_id() or str(uuid.uuid4())
