# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/routes/__init__.py

Ensamblador de rutas del módulo Payments.

Incluye:
- /payments/create-intent
- /payments/webhook
- /payments/verify
- /payments/history
- /payments/sales
- /payments/{purchaseId}/cancel
- /payments/metrics (Prometheus)

Autor: Vidmarket
Fecha: 2026-10-19
"""

from fastapi import APIRouter

from app.modules.payments.metrics.routes import router_prometheus
from .payments import router as payments_router
from .webhooks_stripe import router as webhooks_stripe_router

router = APIRouter()

# Prefijo común /payments para todas las rutas del módulo
router.include_router(webhooks_stripe_router, prefix="/payments")
router.include_router(payments_router, prefix="/payments")
router.include_router(router_prometheus, prefix="/payments")

__all__ = ["router"]

# Fin del archivo backend/app/modules/payments/routes/__init__.py
