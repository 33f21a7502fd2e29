# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/adapters/stripe_gateway.py

Implementación de PaymentGatewayAdapter sobre el SDK de Stripe.

- El SDK es síncrono: las llamadas de red corren en threadpool para no
  bloquear el event loop.
- La API key se pasa por llamada (api_key=...), sin tocar stripe.api_key
  global.
- La firma del webhook se verifica con el webhook secret (HMAC-SHA256,
  tolerancia de 5 minutos).

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import json
import logging
from typing import Mapping, Optional

import stripe
from fastapi.concurrency import run_in_threadpool

from app.shared.errors import PaymentError
from .gateway_adapter import (
    GatewayEvent,
    GatewayIntent,
    PaymentGatewayAdapter,
    WebhookSignatureError,
    event_from_payload,
)

logger = logging.getLogger(__name__)

SIGNATURE_TOLERANCE_SECONDS = 300


def _gateway_error(exc: Exception) -> PaymentError:
    return PaymentError(
        "Payment gateway error",
        code="GATEWAY_ERROR",
        status_code=502,
        details={"gateway": "stripe", "reason": type(exc).__name__},
    )


class StripeGatewayAdapter(PaymentGatewayAdapter):
    """Pasarela Stripe (PaymentIntents + webhooks firmados)."""

    name = "stripe"

    def __init__(self, secret_key: Optional[str], webhook_secret: Optional[str]):
        if not secret_key:
            logger.warning("STRIPE_SECRET_KEY not configured")
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret

    @property
    def is_configured(self) -> bool:
        return bool(self._secret_key)

    async def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> GatewayIntent:
        if not self.is_configured:
            raise PaymentError(
                "Payment gateway is not configured",
                code="GATEWAY_ERROR",
                status_code=503,
            )

        params = {
            "amount": amount_minor_units,
            "currency": currency.lower(),
            "metadata": dict(metadata),
            "automatic_payment_methods": {"enabled": True},
            "api_key": self._secret_key,
        }
        purchase_id = metadata.get("purchaseId")
        if purchase_id:
            # Un reintento del mismo purchase no crea un segundo intent
            params["idempotency_key"] = f"purchase-intent-{purchase_id}"

        try:
            intent = await run_in_threadpool(stripe.PaymentIntent.create, **params)
        except stripe.StripeError as e:
            logger.error(
                "stripe_create_intent_failed: purchase_id=%s error=%s",
                purchase_id, e,
            )
            raise _gateway_error(e) from e

        logger.info(
            "stripe_intent_created: gateway_payment_id=%s purchase_id=%s amount=%d",
            intent.id, purchase_id, amount_minor_units,
        )
        return GatewayIntent(gateway_payment_id=intent.id, client_secret=intent.client_secret)

    def verify_event(self, raw_body: bytes, signature_header: Optional[str]) -> GatewayEvent:
        if not signature_header:
            raise WebhookSignatureError("missing Stripe-Signature header")
        if not self._webhook_secret:
            logger.error("STRIPE_WEBHOOK_SECRET not configured; rejecting webhook")
            raise WebhookSignatureError("webhook secret not configured")

        payload = raw_body.decode("utf-8") if isinstance(raw_body, bytes) else raw_body
        try:
            stripe.WebhookSignature.verify_header(
                payload,
                signature_header,
                self._webhook_secret,
                SIGNATURE_TOLERANCE_SECONDS,
            )
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureError("invalid signature") from e

        try:
            data = json.loads(payload)
        except ValueError as e:
            raise WebhookSignatureError("malformed payload") from e
        if not isinstance(data, dict):
            raise WebhookSignatureError("malformed payload")

        return event_from_payload(data)

    async def cancel_intent(self, gateway_payment_id: str) -> None:
        try:
            await run_in_threadpool(
                stripe.PaymentIntent.cancel,
                gateway_payment_id,
                api_key=self._secret_key,
            )
        except stripe.StripeError as e:
            logger.error(
                "stripe_cancel_intent_failed: gateway_payment_id=%s error=%s",
                gateway_payment_id, e,
            )
            raise _gateway_error(e) from e
        logger.info("stripe_intent_canceled: gateway_payment_id=%s", gateway_payment_id)


__all__ = ["StripeGatewayAdapter", "SIGNATURE_TOLERANCE_SECONDS"]
