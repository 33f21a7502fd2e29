# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/__init__.py

Superficie de exportación de servicios del módulo Payments.

Incluye:
- PurchaseIntentService
- WebhookFulfillmentService

Autor: Vidmarket
Fecha: 2026-10-19
"""

from .purchase_intent_service import (
    IntentResult,
    PurchaseIntentService,
    PurchasePage,
    PurchaseStatusView,
)
from .webhook_fulfillment_service import WebhookFulfillmentService

__all__ = [
    "PurchaseIntentService",
    "WebhookFulfillmentService",
    "IntentResult",
    "PurchasePage",
    "PurchaseStatusView",
]

# Fin del archivo backend/app/modules/payments/services/__init__.py
