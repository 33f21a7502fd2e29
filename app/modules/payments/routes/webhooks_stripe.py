# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/routes/webhooks_stripe.py

Webhook endpoint de la pasarela.

Endpoint:
- POST /payments/webhook

- Lee el body crudo (la firma se calcula sobre los bytes exactos).
- Firma ausente o inválida -> 400, sin cambios de estado.
- Cualquier otro resultado -> 200 {"received": true, "status": ...}, incluso
  si el procesamiento falló, para que la pasarela no reintente en bucle.
  Los fallos se cuentan en payments_webhook_outcome_total{outcome="error"}.
- Rate limit por IP (WEBHOOK_RATE_LIMIT_PER_MINUTE).

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.core.container import get_fulfillment_service
from app.modules.payments.adapters import WebhookSignatureError
from app.modules.payments.metrics import observe_webhook_rejected
from app.modules.payments.schemas import WebhookAck
from app.modules.payments.services import WebhookFulfillmentService
from app.shared.security.rate_limit_dep import RateLimitDep, RateLimitExceeded

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="",
    tags=["payments:webhooks"],
)

webhook_rate_limit = RateLimitDep(
    "payments:webhook",
    window_sec=60,
    limit_setting="webhook_rate_limit_per_minute",
)


async def limit_webhooks(
    request: Request,
    service: WebhookFulfillmentService = Depends(get_fulfillment_service),
) -> None:
    try:
        await webhook_rate_limit(request)
    except RateLimitExceeded:
        observe_webhook_rejected(service.provider, "rate_limited")
        raise


@router.post(
    "/webhook",
    response_model=WebhookAck,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(limit_webhooks)],
)
async def gateway_webhook(
    request: Request,
    service: WebhookFulfillmentService = Depends(get_fulfillment_service),
) -> WebhookAck:
    """
    Webhook de la pasarela (payment_intent.*).

    Requiere header Stripe-Signature.
    """
    raw_body = await request.body()
    sig_header = request.headers.get("Stripe-Signature")

    try:
        result = await service.handle(raw_body, sig_header)
    except WebhookSignatureError as e:
        logger.warning("webhook_rejected: reason=%s", e)
        observe_webhook_rejected(service.provider, "invalid_signature")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_SIGNATURE", "message": str(e)},
        ) from e

    return WebhookAck(received=True, status=result["status"])


__all__ = ["router"]

# Fin del archivo backend/app/modules/payments/routes/webhooks_stripe.py
