from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr

"""
Schemas Perfil (Pydantic).

Rôle (fonctionnel) :
- Changement de plan (PUT /perfil/plano).
- Activation d’un code promo (POST /perfil/promo-code).
"""


class PlanoUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    planoId: StrictStr = Field(min_length=1, max_length=36)


class PromoCodeRedeem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: StrictStr = Field(min_length=3, max_length=64)

    def normalized(self) -> str:
        return self.code.strip().lower()
