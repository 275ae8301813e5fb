from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator

"""
Schemas Bancas (Pydantic).

Rôle (fonctionnel) :
- Contrat d’entrée des bancas (création / mise à jour partielle).
- Champs reconnus : nome, descricao, status, ePadrao, saldoInicial.

Règles :
- Tout champ inconnu (dont "cor") est ignoré : jamais recopié dans le résultat.
- descricao : chaîne (max 500), “blanche” -> None.
- saldoInicial : nombre ou chaîne au format BR ("1.234,56"), >= 0.
- model_dump(exclude_unset=True) = uniquement les clés fournies par le client.
"""

BancaStatus = Literal["Ativa", "Inativa"]


def coerce_saldo(value: Any) -> Any:
    """
    Coercition de saldoInicial.

    - None / "" -> None (absent)
    - "1.234,56" -> 1234.56 (séparateur de milliers retiré, virgule décimale)
    - bool : refusé (pas un montant)
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("saldoInicial deve ser um número")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        s = s.replace(".", "").replace(",", ".")
        try:
            return float(s)
        except ValueError:
            raise ValueError("saldoInicial deve ser um número") from None
    raise ValueError("saldoInicial deve ser um número")


def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        return None
    return value


class _BancaFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    descricao: Optional[StrictStr] = Field(default=None, max_length=500)
    status: Optional[BancaStatus] = None
    ePadrao: Optional[StrictBool] = None
    saldoInicial: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    @field_validator("descricao")
    @classmethod
    def _descricao_blank(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)

    @field_validator("saldoInicial", mode="before")
    @classmethod
    def _saldo(cls, v: Any) -> Any:
        return coerce_saldo(v)


class BancaCreate(_BancaFields):
    nome: StrictStr = Field(min_length=1, max_length=100)


class BancaUpdate(_BancaFields):
    nome: Optional[StrictStr] = Field(default=None, min_length=1, max_length=100)
