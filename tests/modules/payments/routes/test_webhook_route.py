# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/routes/test_webhook_route.py

Tests HTTP de POST /payments/webhook.

Autor: Vidmarket
Fecha: 2026-10-19
"""

import pytest

from app.modules.payments.adapters import EVENT_PAYMENT_SUCCEEDED
from app.modules.payments.enums import PurchaseStatus
from app.modules.payments.models import Purchase

BUYER = "buyer-1"
VIDEO = "vid-1"


async def _post_webhook(client, body, signature):
    headers = {"Content-Type": "application/json"}
    if signature is not None:
        headers["Stripe-Signature"] = signature
    return await client.post("/payments/webhook", content=body, headers=headers)


class TestWebhookRoute:
    @pytest.mark.asyncio
    async def test_valid_event_processed(self, async_client, container, gateway, event_body, session_factory):
        created = await container.purchases.create_intent(BUYER, VIDEO)
        body = event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999)

        resp = await _post_webhook(async_client, body, gateway.sign(body))

        assert resp.status_code == 200
        assert resp.json() == {"received": True, "status": "processed"}
        async with session_factory() as session:
            purchase = await session.get(Purchase, created.purchase_id)
        assert purchase.status is PurchaseStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_redelivery_acknowledged_as_duplicate(self, async_client, container, gateway, event_body):
        await container.purchases.create_intent(BUYER, VIDEO)
        body = event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999)

        await _post_webhook(async_client, body, gateway.sign(body))
        resp = await _post_webhook(async_client, body, gateway.sign(body))

        assert resp.status_code == 200
        assert resp.json()["status"] == "duplicate"

    @pytest.mark.asyncio
    async def test_invalid_signature_rejected(self, async_client, container, event_body, session_factory):
        created = await container.purchases.create_intent(BUYER, VIDEO)
        body = event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999)

        resp = await _post_webhook(async_client, body, "0" * 64)

        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "INVALID_SIGNATURE"
        async with session_factory() as session:
            purchase = await session.get(Purchase, created.purchase_id)
        assert purchase.status is PurchaseStatus.PENDING

    @pytest.mark.asyncio
    async def test_missing_signature_rejected(self, async_client, event_body):
        resp = await _post_webhook(async_client, event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1"), None)
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_event_still_acknowledged(self, async_client, gateway, event_body):
        body = event_body("customer.created", "cus_1")

        resp = await _post_webhook(async_client, body, gateway.sign(body))

        assert resp.status_code == 200
        assert resp.json() == {"received": True, "status": "ignored"}

    @pytest.mark.asyncio
    async def test_rate_limited_per_ip(self, async_client, container, gateway, event_body):
        container.settings.webhook_rate_limit_per_minute = 2
        body = event_body("customer.created", "cus_1")

        statuses = [
            (await _post_webhook(async_client, body, gateway.sign(body))).status_code
            for _ in range(3)
        ]

        assert statuses == [200, 200, 429]


# Fin del archivo backend/tests/modules/payments/routes/test_webhook_route.py
