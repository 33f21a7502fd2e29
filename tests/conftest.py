# backend/tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests para Vidmarket.

- PYTHON_ENV=test antes de importar la app.
- Ledger en SQLite (aiosqlite) sobre un archivo temporal por test: las
  pruebas de concurrencia usan varias conexiones reales.
- Store clave-valor en memoria (MemoryCacheBackend).
- Pasarela falsa (FakeGateway) con firma HMAC propia.
- Cliente httpx con ASGITransport + asgi-lifespan.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import json
import os
from collections.abc import AsyncIterator
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

os.environ["PYTHON_ENV"] = "test"

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from app.core.container import ServiceContainer, assemble_container
from app.modules.auth.security import create_access_token
from app.modules.payments.adapters.gateway_adapter import (
    GatewayEvent,
    GatewayIntent,
    PaymentGatewayAdapter,
    WebhookSignatureError,
    event_from_payload,
)
from app.modules.payments.models import Purchase  # noqa: F401  (registra la tabla)
from app.modules.videos.models import Video
from app.shared.cache import MemoryCacheBackend
from app.shared.config import load_settings
from app.shared.config.settings_base import BaseAppSettings
from app.shared.database import Base, create_engine_from_settings, create_session_factory

CREATOR_ID = "creator-1"
BUYER_ID = "buyer-1"
VIDEO_ID = "vid-1"


# -----------------------------------------------------------------------------
# Pasarela falsa
# -----------------------------------------------------------------------------
class FakeGateway(PaymentGatewayAdapter):
    """
    Pasarela en memoria.

    - create_intent devuelve pi_test_{n}; `fail_with` fuerza un error y
      `delay` simula latencia de red.
    - cancel_intent falla con `cancel_fail_with` (p.ej. intent ya cobrado).
    - sign(body) produce la firma que verify_event acepta.
    """

    name = "fake"

    def __init__(self, secret: str = "whsec_fake"):
        self.secret = secret
        self.intents: List[Dict[str, Any]] = []
        self.canceled: List[str] = []
        self.fail_with: Optional[Exception] = None
        self.delay: float = 0.0
        self.cancel_fail_with: Optional[Exception] = None

    async def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> GatewayIntent:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        n = len(self.intents) + 1
        self.intents.append({
            "amount": amount_minor_units,
            "currency": currency,
            "metadata": dict(metadata),
        })
        gpid = f"pi_test_{n}"
        return GatewayIntent(gateway_payment_id=gpid, client_secret=f"{gpid}_secret_abc")

    def sign(self, body: bytes) -> str:
        return hmac.new(self.secret.encode(), body, hashlib.sha256).hexdigest()

    def verify_event(self, raw_body: bytes, signature_header: Optional[str]) -> GatewayEvent:
        if not signature_header:
            raise WebhookSignatureError("missing signature")
        if not hmac.compare_digest(self.sign(raw_body), signature_header):
            raise WebhookSignatureError("invalid signature")
        return event_from_payload(json.loads(raw_body))

    async def cancel_intent(self, gateway_payment_id: str) -> None:
        if self.cancel_fail_with is not None:
            raise self.cancel_fail_with
        self.canceled.append(gateway_payment_id)


def make_event_body(
    event_type: str,
    gateway_payment_id: str,
    *,
    amount: Optional[int] = None,
    metadata: Optional[Dict[str, str]] = None,
    event_id: str = "evt_1",
) -> bytes:
    obj: Dict[str, Any] = {"id": gateway_payment_id, "metadata": metadata or {}}
    if amount is not None:
        obj["amount"] = amount
    return json.dumps({"id": event_id, "type": event_type, "data": {"object": obj}}).encode()


# -----------------------------------------------------------------------------
# Fixtures de infraestructura
# -----------------------------------------------------------------------------
@pytest.fixture
def settings(tmp_path) -> BaseAppSettings:
    base = load_settings("test")
    return base.model_copy(update={
        "db_url": f"sqlite+aiosqlite:///{tmp_path / 'vidmarket_test.db'}",
        "lock_retry_delay_ms": 10,
    })


@pytest_asyncio.fixture
async def engine(settings):
    eng = create_engine_from_settings(settings)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def store() -> MemoryCacheBackend:
    return MemoryCacheBackend()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest_asyncio.fixture
async def videos(session_factory) -> Dict[str, Video]:
    """Catálogo mínimo: un video vendible, uno con precio inválido."""
    rows = [
        Video(
            id=VIDEO_ID,
            title="Intro to Sourdough",
            price=Decimal("9.99"),
            owner_id=CREATOR_ID,
            preview_url="https://cdn.example.com/vid-1/preview.mp4",
            full_video_url="https://cdn.example.com/vid-1/full.mp4",
        ),
        Video(
            id="vid-free",
            title="Free sample",
            price=Decimal("0.00"),
            owner_id=CREATOR_ID,
        ),
        Video(
            id="vid-2",
            title="Advanced Lamination",
            price=Decimal("24.50"),
            owner_id=CREATOR_ID,
            full_video_url="https://cdn.example.com/vid-2/full.mp4",
        ),
    ]
    async with session_factory() as session:
        session.add_all(rows)
        await session.commit()
    return {v.id: v for v in rows}


@pytest.fixture
def container(settings, engine, store, gateway, session_factory, videos) -> ServiceContainer:
    return assemble_container(
        settings,
        engine=engine,
        store=store,
        gateway=gateway,
        session_factory=session_factory,
    )


@pytest_asyncio.fixture
async def async_client(container) -> AsyncIterator[AsyncClient]:
    """
    Cliente HTTP asíncrono contra la app con ASGITransport
    y gestión de startup/shutdown mediante asgi-lifespan.
    """
    from app.main import create_app

    app = create_app(container=container)
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client


@pytest.fixture
def auth_headers(settings):
    def _headers(user_id: str = BUYER_ID) -> Dict[str, str]:
        token = create_access_token(user_id, settings=settings)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def deliver(container, gateway):
    """Entrega un webhook firmado directamente al servicio de fulfillment."""
    async def _deliver(body: bytes) -> Dict[str, Any]:
        return await container.fulfillment.handle(body, gateway.sign(body))
    return _deliver


@pytest.fixture
def event_body():
    return make_event_body
