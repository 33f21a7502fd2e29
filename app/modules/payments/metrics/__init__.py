# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/metrics/__init__.py

Métricas Prometheus del módulo de compras: checkouts, webhooks y fallos
de fulfillment (base de las alertas).

Autor: Vidmarket
Fecha: 2026-10-19
"""

from .exporters.prometheus_exporter import (
    observe_amount_mismatch,
    observe_checkout_started,
    observe_fulfillment_error,
    observe_purchase_status,
    observe_webhook_outcome,
    observe_webhook_received,
    observe_webhook_rejected,
    observe_webhook_verified,
    registry,
    render_prometheus_metrics,
)

__all__ = [
    "registry",
    "render_prometheus_metrics",
    "observe_checkout_started",
    "observe_webhook_received",
    "observe_webhook_verified",
    "observe_webhook_outcome",
    "observe_webhook_rejected",
    "observe_amount_mismatch",
    "observe_fulfillment_error",
    "observe_purchase_status",
]

# Fin del archivo backend/app/modules/payments/metrics/__init__.py
