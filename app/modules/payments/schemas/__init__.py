# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/schemas/__init__.py

Punto de entrada para los esquemas Pydantic del módulo Payments.
"""

from __future__ import annotations

from .common_schemas import CamelModel, Money, PageMeta
from .purchase_schemas import (
    CancelPurchaseResponse,
    CreateIntentRequest,
    CreateIntentResponse,
    PurchaseListResponse,
    PurchaseOut,
    PurchaseStatusResponse,
    WebhookAck,
)

__all__ = [
    "CamelModel",
    "Money",
    "PageMeta",
    "CreateIntentRequest",
    "CreateIntentResponse",
    "PurchaseStatusResponse",
    "PurchaseOut",
    "PurchaseListResponse",
    "CancelPurchaseResponse",
    "WebhookAck",
]

# Fin del archivo backend/app/modules/payments/schemas/__init__.py
