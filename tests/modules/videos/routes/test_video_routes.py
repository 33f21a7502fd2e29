# -*- coding: utf-8 -*-
"""
backend/tests/modules/videos/routes/test_video_routes.py

Tests HTTP de /videos (acceso, preview, tokens de streaming y descarga).

Autor: Vidmarket
Fecha: 2026-10-19
"""

import pytest
import pytest_asyncio

from app.modules.payments.adapters import EVENT_PAYMENT_SUCCEEDED

BUYER = "buyer-1"
CREATOR = "creator-1"
VIDEO = "vid-1"


@pytest_asyncio.fixture
async def purchased(container, deliver, event_body):
    """buyer-1 compró vid-1."""
    await container.purchases.create_intent(BUYER, VIDEO)
    await deliver(event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999))


class TestAccessRoute:
    @pytest.mark.asyncio
    async def test_buyer_without_purchase(self, async_client, auth_headers):
        resp = await async_client.get(f"/videos/{VIDEO}/access", headers=auth_headers(BUYER))

        assert resp.status_code == 200
        assert resp.json() == {"hasAccess": False, "isOwner": False}

    @pytest.mark.asyncio
    async def test_owner(self, async_client, auth_headers):
        resp = await async_client.get(f"/videos/{VIDEO}/access", headers=auth_headers(CREATOR))
        assert resp.json() == {"hasAccess": True, "isOwner": True}

    @pytest.mark.asyncio
    async def test_after_purchase(self, async_client, auth_headers, purchased):
        resp = await async_client.get(f"/videos/{VIDEO}/access", headers=auth_headers(BUYER))
        assert resp.json() == {"hasAccess": True, "isOwner": False}

    @pytest.mark.asyncio
    async def test_unknown_video(self, async_client, auth_headers):
        resp = await async_client.get("/videos/missing/access", headers=auth_headers(BUYER))
        assert resp.status_code == 404
        assert resp.json()["code"] == "VIDEO_NOT_FOUND"


class TestPreviewRoute:
    @pytest.mark.asyncio
    async def test_public_preview(self, async_client):
        resp = await async_client.get(f"/videos/{VIDEO}/preview")

        assert resp.status_code == 200
        assert resp.json() == {
            "videoId": VIDEO,
            "previewUrl": "https://cdn.example.com/vid-1/preview.mp4",
        }


class TestStreamTokenRoutes:
    @pytest.mark.asyncio
    async def test_denied_without_purchase(self, async_client, auth_headers):
        resp = await async_client.post(f"/videos/{VIDEO}/stream-token", headers=auth_headers(BUYER))

        assert resp.status_code == 403
        assert resp.json()["code"] == "VIDEO_ACCESS_DENIED"

    @pytest.mark.asyncio
    async def test_issue_validate_revoke(self, async_client, auth_headers, purchased):
        resp = await async_client.post(f"/videos/{VIDEO}/stream-token", headers=auth_headers(BUYER))
        assert resp.status_code == 200
        token = resp.json()["token"]
        assert resp.json()["expiresIn"] == 14400

        resp = await async_client.get("/videos/stream/validate", params={"token": token})
        assert resp.status_code == 200
        assert resp.json() == {"videoId": VIDEO, "userId": BUYER}

        resp = await async_client.delete(
            "/videos/stream-token", params={"token": token}, headers=auth_headers(BUYER)
        )
        assert resp.status_code == 204

        resp = await async_client.get("/videos/stream/validate", params={"token": token})
        assert resp.status_code == 401
        assert resp.json()["code"] == "INVALID_STREAM_TOKEN"

    @pytest.mark.asyncio
    async def test_owner_can_stream(self, async_client, auth_headers):
        resp = await async_client.post(f"/videos/{VIDEO}/stream-token", headers=auth_headers(CREATOR))
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_validate_without_token(self, async_client):
        resp = await async_client.get("/videos/stream/validate")
        assert resp.status_code == 401


class TestDownloadRoutes:
    @pytest.mark.asyncio
    async def test_download_single_use(self, async_client, auth_headers, purchased):
        resp = await async_client.post(f"/videos/{VIDEO}/download-token", headers=auth_headers(BUYER))
        assert resp.status_code == 200
        download_id = resp.json()["downloadId"]
        assert resp.json()["expiresIn"] == 3600

        first = await async_client.post(f"/videos/downloads/{download_id}/redeem")
        assert first.status_code == 200
        assert first.json() == {"videoId": VIDEO, "url": "https://cdn.example.com/vid-1/full.mp4"}

        second = await async_client.post(f"/videos/downloads/{download_id}/redeem")
        assert second.status_code == 404
        assert second.json()["code"] == "DOWNLOAD_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_download_denied_without_purchase(self, async_client, auth_headers):
        resp = await async_client.post(f"/videos/{VIDEO}/download-token", headers=auth_headers(BUYER))
        assert resp.status_code == 403


# Fin del archivo backend/tests/modules/videos/routes/test_video_routes.py
