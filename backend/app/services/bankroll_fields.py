from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from app.models.bankroll import Bankroll

"""
Bankroll Fields.

Rôle (fonctionnel) :
- Normalisation du tag couleur (cor) : valeur exploitable ou absente (None), jamais "".
- Sanitisation des bancas sortantes : la clé "cor" n’apparaît dans aucune réponse API,
  qu’elle soit présente ou non dans l’enregistrement source.
- Conversion ORM -> mapping (clés camelCase du contrat HTTP) avant sanitisation.
"""

HIDDEN_FIELDS = ("cor",)


def is_valid_color(value: Any) -> bool:
    """True si la valeur est une string non vide après strip."""
    return isinstance(value, str) and value.strip() != ""


def normalize_color(value: Any) -> Optional[str]:
    """Couleur strippée si valide, sinon None (le défaut de la base s’applique)."""
    if not is_valid_color(value):
        return None
    return value.strip()


def sanitize_bankroll(record: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Copie superficielle sans les champs masqués.

    Les autres clés sont reprises telles quelles (objets imbriqués compris, par référence) ;
    l’entrée n’est pas modifiée.
    """
    return {key: value for key, value in record.items() if key not in HIDDEN_FIELDS}


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


def bankroll_record(banca: Bankroll) -> Dict[str, Any]:
    """Enregistrement complet (cor inclus) : toujours passer par sanitize_bankroll avant réponse."""
    return {
        "id": banca.id,
        "usuarioId": banca.usuario_id,
        "nome": banca.nome,
        "descricao": banca.descricao,
        "cor": banca.cor,
        "status": banca.status,
        "ePadrao": banca.e_padrao,
        "criadoEm": _iso(banca.criado_em),
        "createdAt": _iso(banca.created_at),
        "updatedAt": _iso(banca.updated_at),
    }
