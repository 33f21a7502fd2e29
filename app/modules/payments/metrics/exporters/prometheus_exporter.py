# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/metrics/exporters/prometheus_exporter.py

Exporter Prometheus para el módulo de compras.

Las alertas de fulfillment se definen sobre:
- payments_webhook_outcome_total{outcome="error"}
- payments_fulfillment_errors_total (por razón)
- payments_amount_mismatch_total

Autor: Vidmarket
Fecha: 2026-10-19
"""

from datetime import datetime, timezone
import logging

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
# Registro propio del módulo
# --------------------------------------------------------------------------
registry = CollectorRegistry()

# --------------------------------------------------------------------------
# Definición de métricas
# --------------------------------------------------------------------------

# PaymentIntents creados para una compra
CHECKOUT_STARTED_TOTAL = Counter(
    "payments_checkout_started_total",
    "Número total de PaymentIntents creados",
    ["provider", "currency"],
    registry=registry,
)

WEBHOOKS_RECEIVED_TOTAL = Counter(
    "payments_webhook_received_total",
    "Total webhooks recibidos por proveedor",
    ["provider"],
    registry=registry,
)
WEBHOOKS_VERIFIED_TOTAL = Counter(
    "payments_webhook_verified_total",
    "Total webhooks por resultado de verificación de firma (success/failure)",
    ["provider", "result"],
    registry=registry,
)
# outcome: processed/duplicate/in_progress/ignored/noop/rejected/error
WEBHOOKS_OUTCOME_TOTAL = Counter(
    "payments_webhook_outcome_total",
    "Total webhooks por outcome de fulfillment",
    ["provider", "outcome"],
    registry=registry,
)
WEBHOOKS_REJECTED_TOTAL = Counter(
    "payments_webhook_rejected_total",
    "Total webhooks rechazados antes de procesarse (invalid_signature/rate_limited)",
    ["provider", "reason"],
    registry=registry,
)
WEBHOOKS_PROCESSING_SECONDS = Histogram(
    "payments_webhook_processing_seconds",
    "Tiempo de procesamiento de webhooks (segundos)",
    ["provider"],
    registry=registry,
)
AMOUNT_MISMATCH_TOTAL = Counter(
    "payments_amount_mismatch_total",
    "Total de webhooks con monto distinto al de la compra",
    ["provider"],
    registry=registry,
)
FULFILLMENT_ERRORS_TOTAL = Counter(
    "payments_fulfillment_errors_total",
    "Fallos de fulfillment por razón",
    ["provider", "reason"],
    registry=registry,
)

# Transiciones del ledger
PURCHASES_STATUS_TOTAL = Counter(
    "payments_purchase_status_total",
    "Compras que llegaron a un estado terminal",
    ["status"],
    registry=registry,
)


# --------------------------------------------------------------------------
# Funciones auxiliares
# --------------------------------------------------------------------------
def render_prometheus_metrics() -> bytes:
    """Genera la salida actual de las métricas en formato Prometheus."""
    return generate_latest(registry)


def observe_checkout_started(provider: str, currency: str):
    CHECKOUT_STARTED_TOTAL.labels(provider=provider, currency=currency.lower()).inc()


def observe_webhook_received(provider: str):
    WEBHOOKS_RECEIVED_TOTAL.labels(provider=provider).inc()


def observe_webhook_verified(provider: str, verification_result: str, duration: float):
    """
    Registra el resultado de la verificación de firma.

    Args:
        provider: nombre del adapter (stripe)
        verification_result: success/failure
        duration: segundos desde la recepción
    """
    WEBHOOKS_VERIFIED_TOTAL.labels(provider=provider, result=verification_result).inc()
    WEBHOOKS_PROCESSING_SECONDS.labels(provider=provider).observe(duration)


def observe_webhook_outcome(provider: str, outcome: str):
    WEBHOOKS_OUTCOME_TOTAL.labels(provider=provider, outcome=outcome).inc()
    logger.debug("[Prometheus] webhook provider=%s outcome=%s", provider, outcome)


def observe_webhook_rejected(provider: str, reason: str):
    WEBHOOKS_REJECTED_TOTAL.labels(provider=provider, reason=reason).inc()


def observe_amount_mismatch(provider: str):
    AMOUNT_MISMATCH_TOTAL.labels(provider=provider).inc()


def observe_fulfillment_error(provider: str, reason: str):
    FULFILLMENT_ERRORS_TOTAL.labels(provider=provider, reason=reason).inc()


def observe_purchase_status(status: str):
    PURCHASES_STATUS_TOTAL.labels(status=status).inc()


def prometheus_ping() -> dict:
    """Devuelve un dict simple para verificar la salud del exporter."""
    return {
        "status": "ok",
        "service": "payments-metrics",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

# Fin del archivo backend/app/modules/payments/metrics/exporters/prometheus_exporter.py
