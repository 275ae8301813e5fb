from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

"""
Schemas Apostas (Pydantic).

Rôle (fonctionnel) :
- Contrat HTTP des apostas : création, mise à jour partielle, suppression globale.
- Côté API l’événement s’appelle evento / dataEvento ; en base : jogo / dataJogo.
  dataJogo reste accepté en entrée (anciens clients).

Règles principales :
- valorApostado > 0 (max 1 000 000), odd > 0 (max 1000), bonus >= 0.
- Création : dataEvento OU dataJogo obligatoire.
- Dates sans fuseau : considérées en UTC.
"""

DELETE_ALL_CONFIRMATION = "CONFIRMAR_DELETE_TODAS_APOSTAS"


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _ApostaBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    torneio: Optional[str] = Field(default=None, max_length=200)
    pais: Optional[str] = Field(default=None, max_length=100)
    dataEvento: Optional[datetime] = None
    dataJogo: Optional[datetime] = None
    tipster: Optional[str] = Field(default=None, max_length=100)
    aposta: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("dataEvento", "dataJogo")
    @classmethod
    def _dates_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _utc(v)

    def resolved_event_date(self) -> Optional[datetime]:
        """dataEvento prioritaire, sinon dataJogo."""
        return self.dataEvento or self.dataJogo


class ApostaCreate(_ApostaBase):
    bancaId: str = Field(min_length=1)
    esporte: str = Field(min_length=1, max_length=100)
    evento: str = Field(min_length=1, max_length=200)
    mercado: str = Field(min_length=1)
    tipoAposta: str = Field(min_length=1, max_length=100)
    valorApostado: float = Field(gt=0, le=1_000_000)
    odd: float = Field(gt=0, le=1000)
    bonus: float = Field(default=0, ge=0, le=1_000_000)
    status: str = Field(default="Pendente", max_length=50)
    casaDeAposta: str = Field(min_length=1, max_length=100)
    retornoObtido: Optional[float] = Field(default=None, ge=0, le=10_000_000)

    @model_validator(mode="after")
    def _event_date_required(self) -> "ApostaCreate":
        if self.resolved_event_date() is None:
            raise ValueError("Data do evento é obrigatória")
        return self

    def to_columns(self) -> Dict[str, Any]:
        """Valeurs prêtes pour le modèle ORM Bet."""
        return {
            "banca_id": self.bancaId,
            "esporte": self.esporte,
            "jogo": self.evento,
            "torneio": self.torneio,
            "pais": self.pais,
            "mercado": self.mercado,
            "tipo_aposta": self.tipoAposta,
            "valor_apostado": self.valorApostado,
            "odd": self.odd,
            "bonus": self.bonus or 0,
            "data_jogo": self.resolved_event_date(),
            "tipster": self.tipster,
            "status": self.status or "Pendente",
            "casa_de_aposta": self.casaDeAposta,
            "retorno_obtido": self.retornoObtido,
            "aposta": self.aposta,
        }


class ApostaUpdate(_ApostaBase):
    bancaId: Optional[str] = Field(default=None, min_length=1)
    esporte: Optional[str] = Field(default=None, min_length=1, max_length=100)
    evento: Optional[str] = Field(default=None, min_length=1, max_length=200)
    mercado: Optional[str] = Field(default=None, min_length=1)
    tipoAposta: Optional[str] = Field(default=None, min_length=1, max_length=100)
    valorApostado: Optional[float] = Field(default=None, gt=0, le=1_000_000)
    odd: Optional[float] = Field(default=None, gt=0, le=1000)
    bonus: Optional[float] = Field(default=None, ge=0, le=1_000_000)
    status: Optional[str] = Field(default=None, max_length=50)
    casaDeAposta: Optional[str] = Field(default=None, min_length=1, max_length=100)
    retornoObtido: Optional[float] = Field(default=None, ge=0, le=10_000_000)

    def to_columns(self) -> Dict[str, Any]:
        """
        Valeurs à appliquer (uniquement les champs fournis).

        - torneio / pais / tipster / retornoObtido : null explicite = effacement
        - les autres champs ignorent null
        """
        supplied = self.model_fields_set
        values: Dict[str, Any] = {}

        simple = {
            "bancaId": "banca_id",
            "esporte": "esporte",
            "evento": "jogo",
            "mercado": "mercado",
            "tipoAposta": "tipo_aposta",
            "valorApostado": "valor_apostado",
            "odd": "odd",
            "bonus": "bonus",
            "status": "status",
            "casaDeAposta": "casa_de_aposta",
            "aposta": "aposta",
        }
        for field, column in simple.items():
            value = getattr(self, field)
            if field in supplied and value is not None:
                values[column] = value

        for field, column in (
            ("torneio", "torneio"),
            ("pais", "pais"),
            ("tipster", "tipster"),
            ("retornoObtido", "retorno_obtido"),
        ):
            if field in supplied:
                values[column] = getattr(self, field)

        event_date = self.resolved_event_date()
        if event_date is not None:
            values["data_jogo"] = event_date

        return values


class DeleteAllRequest(BaseModel):
    confirmacao: Optional[str] = None
