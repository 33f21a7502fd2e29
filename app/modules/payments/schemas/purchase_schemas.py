# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/schemas/purchase_schemas.py

Contratos de la API de compras (intent, verificación, historial, ventas,
cancelación y acuse de webhook).

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from .common_schemas import CamelModel, Money, PageMeta


# Estado visible para el cliente: pending se reporta como "processing"
PurchaseStatusLiteral = Literal["processing", "completed", "failed"]


class CreateIntentRequest(CamelModel):
    # Opcional a nivel de schema: el servicio responde VALIDATION_ERROR si falta
    video_id: Optional[str] = Field(default=None, description="ID del video a comprar.")


class CreateIntentResponse(CamelModel):
    client_secret: str = Field(description="Secret para confirmar el pago en el cliente.")
    amount: Money
    purchase_id: str


class PurchaseStatusResponse(CamelModel):
    """
    Respuesta de polling tras el pago.

    status=processing -> seguir consultando; completed/failed son finales.
    """

    purchase_id: str
    video_id: str
    status: PurchaseStatusLiteral
    amount: Money
    completed_at: Optional[datetime] = None


class PurchaseOut(CamelModel):
    purchase_id: str
    video_id: str
    user_id: str
    amount: Money
    status: str
    created_at: datetime
    completed_at: Optional[datetime] = None


class PurchaseListResponse(CamelModel):
    items: List[PurchaseOut]
    meta: PageMeta


class CancelPurchaseResponse(CamelModel):
    purchase_id: str
    status: PurchaseStatusLiteral


class WebhookAck(CamelModel):
    received: bool = True
    status: str


__all__ = [
    "CreateIntentRequest",
    "CreateIntentResponse",
    "PurchaseStatusResponse",
    "PurchaseOut",
    "PurchaseListResponse",
    "CancelPurchaseResponse",
    "WebhookAck",
    "PurchaseStatusLiteral",
]

# Fin del archivo backend/app/modules/payments/schemas/purchase_schemas.py
