# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/schemas/common_schemas.py

Esquemas comunes para la API pública: base camelCase, montos y paginación.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel


# Montos: Decimal internamente, número JSON en la respuesta
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Base de request/response con alias camelCase (acepta también snake_case)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PageMeta(CamelModel):
    """
    Metadatos de paginación para respuestas con listas.
    """

    total: int = Field(ge=0, description="Número total de registros.")
    limit: int = Field(ge=1, description="Límite de registros por página.")
    page: int = Field(ge=1, description="Página actual (1-based).")
    pages: int = Field(ge=0, description="Número total de páginas.")


__all__ = ["CamelModel", "Money", "PageMeta"]

# Fin del archivo backend/app/modules/payments/schemas/common_schemas.py
