# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/routes/test_payments_routes.py

Tests HTTP de /payments (create-intent, verify, history, sales, cancel).

Autor: Vidmarket
Fecha: 2026-10-19
"""

import pytest

from app.modules.payments.adapters import EVENT_PAYMENT_SUCCEEDED
from app.shared.errors import PaymentError

BUYER = "buyer-1"
CREATOR = "creator-1"
VIDEO = "vid-1"


async def _create(client, headers, video_id=VIDEO):
    return await client.post("/payments/create-intent", json={"videoId": video_id}, headers=headers)


class TestCreateIntentRoute:
    @pytest.mark.asyncio
    async def test_success(self, async_client, auth_headers):
        resp = await _create(async_client, auth_headers(BUYER))

        assert resp.status_code == 200
        body = resp.json()
        assert body["clientSecret"] == "pi_test_1_secret_abc"
        assert body["amount"] == 9.99
        assert body["purchaseId"]

    @pytest.mark.asyncio
    async def test_snake_case_body_accepted(self, async_client, auth_headers):
        resp = await async_client.post(
            "/payments/create-intent", json={"video_id": VIDEO}, headers=auth_headers(BUYER)
        )
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_requires_authentication(self, async_client):
        resp = await async_client.post("/payments/create-intent", json={"videoId": VIDEO})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, async_client):
        resp = await async_client.post(
            "/payments/create-intent",
            json={"videoId": VIDEO},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert resp.status_code == 401
        assert resp.json()["detail"]["code"] == "INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_missing_video_id(self, async_client, auth_headers):
        resp = await async_client.post("/payments/create-intent", json={}, headers=auth_headers(BUYER))

        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_VIDEO_ID"

    @pytest.mark.asyncio
    async def test_unknown_video(self, async_client, auth_headers):
        resp = await _create(async_client, auth_headers(BUYER), video_id="missing")
        assert resp.status_code == 404
        assert resp.json()["code"] == "VIDEO_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_own_content(self, async_client, auth_headers):
        resp = await _create(async_client, auth_headers(CREATOR))
        assert resp.status_code == 402
        assert resp.json()["code"] == "OWN_CONTENT"

    @pytest.mark.asyncio
    async def test_second_request_in_progress(self, async_client, auth_headers):
        await _create(async_client, auth_headers(BUYER))
        resp = await _create(async_client, auth_headers(BUYER))

        assert resp.status_code == 409
        assert resp.json()["code"] == "PURCHASE_IN_PROGRESS"

    @pytest.mark.asyncio
    async def test_already_purchased(self, async_client, auth_headers, deliver, event_body):
        await _create(async_client, auth_headers(BUYER))
        await deliver(event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999))

        resp = await _create(async_client, auth_headers(BUYER))
        assert resp.status_code == 409
        assert resp.json()["code"] == "ALREADY_PURCHASED"

    @pytest.mark.asyncio
    async def test_gateway_error(self, async_client, auth_headers, gateway):
        gateway.fail_with = PaymentError("Payment gateway error", code="GATEWAY_ERROR", status_code=502)

        resp = await _create(async_client, auth_headers(BUYER))

        assert resp.status_code == 502
        assert resp.json()["code"] == "GATEWAY_ERROR"


class TestVerifyRoute:
    @pytest.mark.asyncio
    async def test_processing_then_completed(self, async_client, auth_headers, deliver, event_body):
        created = (await _create(async_client, auth_headers(BUYER))).json()

        resp = await async_client.get(
            "/payments/verify", params={"purchaseId": created["purchaseId"]}, headers=auth_headers(BUYER)
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "processing"
        assert resp.json()["completedAt"] is None

        await deliver(event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999))

        resp = await async_client.get(
            "/payments/verify", params={"purchaseId": created["purchaseId"]}, headers=auth_headers(BUYER)
        )
        body = resp.json()
        assert body["status"] == "completed"
        assert body["videoId"] == VIDEO
        assert body["completedAt"] is not None

    @pytest.mark.asyncio
    async def test_missing_purchase_id(self, async_client, auth_headers):
        resp = await async_client.get("/payments/verify", headers=auth_headers(BUYER))
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_PURCHASE_ID"

    @pytest.mark.asyncio
    async def test_foreign_purchase_not_found(self, async_client, auth_headers):
        created = (await _create(async_client, auth_headers(BUYER))).json()

        resp = await async_client.get(
            "/payments/verify", params={"purchaseId": created["purchaseId"]}, headers=auth_headers("buyer-2")
        )
        assert resp.status_code == 404
        assert resp.json()["code"] == "PURCHASE_NOT_FOUND"


class TestHistoryAndSales:
    @pytest.mark.asyncio
    async def test_history_paginated(self, async_client, auth_headers):
        await _create(async_client, auth_headers(BUYER))
        await _create(async_client, auth_headers(BUYER), video_id="vid-2")

        resp = await async_client.get("/payments/history", params={"limit": 1}, headers=auth_headers(BUYER))

        assert resp.status_code == 200
        body = resp.json()
        assert body["meta"] == {"total": 2, "limit": 1, "page": 1, "pages": 2}
        item = body["items"][0]
        assert set(item) >= {"purchaseId", "videoId", "userId", "amount", "status", "createdAt", "completedAt"}
        assert item["status"] == "pending"

    @pytest.mark.asyncio
    async def test_history_status_filter(self, async_client, auth_headers):
        await _create(async_client, auth_headers(BUYER))

        resp = await async_client.get(
            "/payments/history", params={"status": "completed"}, headers=auth_headers(BUYER)
        )
        assert resp.json()["meta"]["total"] == 0

        resp = await async_client.get("/payments/history", params={"status": "bogus"}, headers=auth_headers(BUYER))
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_STATUS"

    @pytest.mark.asyncio
    async def test_history_invalid_limit(self, async_client, auth_headers):
        resp = await async_client.get("/payments/history", params={"limit": 500}, headers=auth_headers(BUYER))
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_PAGINATION"

    @pytest.mark.asyncio
    async def test_sales_for_creator(self, async_client, auth_headers, deliver, event_body):
        await _create(async_client, auth_headers(BUYER))
        await deliver(event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999))

        resp = await async_client.get("/payments/sales", headers=auth_headers(CREATOR))

        assert resp.status_code == 200
        body = resp.json()
        assert body["meta"]["total"] == 1
        assert body["items"][0]["userId"] == BUYER
        assert body["items"][0]["amount"] == 9.99


class TestCancelRoute:
    @pytest.mark.asyncio
    async def test_cancel_pending(self, async_client, auth_headers, gateway):
        created = (await _create(async_client, auth_headers(BUYER))).json()

        resp = await async_client.post(f"/payments/{created['purchaseId']}/cancel", headers=auth_headers(BUYER))

        assert resp.status_code == 200
        assert resp.json() == {"purchaseId": created["purchaseId"], "status": "failed"}
        assert gateway.canceled == ["pi_test_1"]

    @pytest.mark.asyncio
    async def test_cancel_completed_rejected(self, async_client, auth_headers, deliver, event_body):
        created = (await _create(async_client, auth_headers(BUYER))).json()
        await deliver(event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999))

        resp = await async_client.post(f"/payments/{created['purchaseId']}/cancel", headers=auth_headers(BUYER))

        assert resp.status_code == 409
        assert resp.json()["code"] == "INVALID_PURCHASE_STATUS"


# Fin del archivo backend/tests/modules/payments/routes/test_payments_routes.py
