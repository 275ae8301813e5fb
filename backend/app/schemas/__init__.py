"""
app.schemas

Package des schémas API (Pydantic).

Rôle (fonctionnel) :
- Valide les payloads d’entrée (bancas, apostas) et les convertit en colonnes ORM.
- Sépare clairement :
  - les modèles ORM (app.models) = persistance DB
  - les schémas Pydantic (app.schemas) = contrat HTTP / validation

Les noms de champs suivent le contrat du front (camelCase portugais : bancaId, saldoInicial…).
"""
