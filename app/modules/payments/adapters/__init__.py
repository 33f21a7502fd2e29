# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/adapters/__init__.py

Adaptadores para la pasarela de pago.
"""

from .gateway_adapter import (
    EVENT_PAYMENT_CANCELED,
    EVENT_PAYMENT_FAILED,
    EVENT_PAYMENT_PROCESSING,
    EVENT_PAYMENT_SUCCEEDED,
    GatewayEvent,
    GatewayIntent,
    PaymentGatewayAdapter,
    WebhookSignatureError,
)
from .stripe_gateway import StripeGatewayAdapter

__all__ = [
    "PaymentGatewayAdapter",
    "StripeGatewayAdapter",
    "GatewayEvent",
    "GatewayIntent",
    "WebhookSignatureError",
    "EVENT_PAYMENT_SUCCEEDED",
    "EVENT_PAYMENT_FAILED",
    "EVENT_PAYMENT_CANCELED",
    "EVENT_PAYMENT_PROCESSING",
]
