from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

"""
Schemas Financeiro (Pydantic).

Rôle (fonctionnel) :
- Contrat HTTP des transactions d’une banca (Depósito / Saque).

Règles :
- valor > 0 (max 10 000 000), casaDeAposta 1..100 caractères, observacao max 500.
- dataTransacao optionnelle (défaut : maintenant), sans fuseau = UTC.
- Mise à jour partielle : observacao peut être effacée avec null explicite.
"""

TipoTransacao = Literal["Depósito", "Saque"]


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _TransacaoFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    dataTransacao: Optional[datetime] = None
    observacao: Optional[str] = Field(default=None, max_length=500)

    @field_validator("dataTransacao")
    @classmethod
    def _naive_is_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _utc(value)


class TransacaoCreate(_TransacaoFields):
    bancaId: StrictStr = Field(min_length=1, max_length=36)
    tipo: TipoTransacao
    casaDeAposta: StrictStr = Field(min_length=1, max_length=100)
    valor: float = Field(gt=0, le=10_000_000, allow_inf_nan=False)

    def to_columns(self) -> Dict[str, Any]:
        columns: Dict[str, Any] = {
            "banca_id": self.bancaId,
            "tipo": self.tipo,
            "casa_de_aposta": self.casaDeAposta,
            "valor": self.valor,
            "observacao": self.observacao,
        }
        # Absent : défaut du modèle (utcnow)
        if self.dataTransacao is not None:
            columns["data_transacao"] = self.dataTransacao
        return columns


class TransacaoUpdate(_TransacaoFields):
    bancaId: Optional[StrictStr] = Field(default=None, min_length=1, max_length=36)
    tipo: Optional[TipoTransacao] = None
    casaDeAposta: Optional[StrictStr] = Field(default=None, min_length=1, max_length=100)
    valor: Optional[float] = Field(default=None, gt=0, le=10_000_000, allow_inf_nan=False)

    def to_columns(self) -> Dict[str, Any]:
        mapping = {
            "bancaId": "banca_id",
            "tipo": "tipo",
            "casaDeAposta": "casa_de_aposta",
            "valor": "valor",
            "dataTransacao": "data_transacao",
        }
        columns = {
            column: getattr(self, field)
            for field, column in mapping.items()
            if getattr(self, field) is not None
        }
        if "observacao" in self.model_fields_set:
            columns["observacao"] = self.observacao
        return columns
