# -*- coding: utf-8 -*-
"""
backend/app/core/container.py

Contenedor de servicios de Vidmarket.

- build_container(): construye engine, fábrica de sesiones, store, locks,
  pasarela y servicios UNA vez (lifespan de la app).
- aclose(): libera engine y store en el shutdown.
- Providers para Depends(...): leen request.app.state.services.

Las pruebas arman su propio contenedor con SQLite, store en memoria y una
pasarela falsa, y lo pasan a create_app().

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.shared.cache import CacheBackend, LockManager
from app.shared.config.settings_base import BaseAppSettings
from app.shared.database import create_engine_from_settings, create_session_factory
from app.shared.redis import connect_cache_backend
from app.shared.security.rate_limit_service import RateLimitService
from app.modules.payments.adapters import PaymentGatewayAdapter, StripeGatewayAdapter
from app.modules.payments.services import PurchaseIntentService, WebhookFulfillmentService
from app.modules.videos.services import AccessTokenIssuer, EntitlementCache, EntitlementService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: BaseAppSettings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    store: CacheBackend
    locks: LockManager
    gateway: PaymentGatewayAdapter
    rate_limiter: RateLimitService
    entitlement_cache: EntitlementCache
    purchases: PurchaseIntentService
    fulfillment: WebhookFulfillmentService
    entitlements: EntitlementService
    tokens: AccessTokenIssuer

    async def aclose(self) -> None:
        try:
            await self.store.close()
        finally:
            await self.engine.dispose()
        logger.info("[container] resources released")


def _secret(value) -> Optional[str]:
    return value.get_secret_value() if value is not None else None


def _build_gateway(settings: BaseAppSettings) -> PaymentGatewayAdapter:
    return StripeGatewayAdapter(
        secret_key=_secret(settings.stripe_secret_key),
        webhook_secret=_secret(settings.stripe_webhook_secret),
    )


def assemble_container(
    settings: BaseAppSettings,
    *,
    engine: AsyncEngine,
    store: CacheBackend,
    gateway: PaymentGatewayAdapter,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> ServiceContainer:
    """Cablea los servicios sobre recursos ya creados (sin I/O)."""
    session_factory = session_factory or create_session_factory(engine)
    locks = LockManager(
        store,
        retry_attempts=settings.lock_retry_attempts,
        retry_delay_ms=settings.lock_retry_delay_ms,
    )
    rate_limiter = RateLimitService(store)
    entitlement_cache = EntitlementCache(store, ttl_seconds=settings.entitlement_cache_ttl_seconds)

    return ServiceContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        store=store,
        locks=locks,
        gateway=gateway,
        rate_limiter=rate_limiter,
        entitlement_cache=entitlement_cache,
        purchases=PurchaseIntentService(
            session_factory=session_factory,
            locks=locks,
            store=store,
            gateway=gateway,
            settings=settings,
        ),
        fulfillment=WebhookFulfillmentService(
            session_factory=session_factory,
            locks=locks,
            store=store,
            gateway=gateway,
            entitlement_cache=entitlement_cache,
            settings=settings,
        ),
        entitlements=EntitlementService(
            session_factory=session_factory,
            cache=entitlement_cache,
        ),
        tokens=AccessTokenIssuer(
            store=store,
            rate_limiter=rate_limiter,
            jwt_secret=settings.jwt_secret_key.get_secret_value(),
            jwt_algorithm=settings.jwt_algorithm,
            stream_ttl_seconds=settings.stream_token_ttl_seconds,
            download_ttl_seconds=settings.download_token_ttl_seconds,
            stream_rate_limit=settings.stream_rate_limit,
            stream_rate_window_seconds=settings.stream_rate_window_seconds,
        ),
    )


async def build_container(settings: BaseAppSettings) -> ServiceContainer:
    """
    Crea los recursos reales según la configuración.

    Raises:
        StorageError: el store configurado no responde (fail-fast).
    """
    engine = create_engine_from_settings(settings)
    try:
        store = await connect_cache_backend(settings)
    except Exception:
        await engine.dispose()
        raise
    container = assemble_container(
        settings,
        engine=engine,
        store=store,
        gateway=_build_gateway(settings),
    )
    logger.info(
        "[container] services ready env=%s store=%s gateway=%s",
        settings.python_env, store.name, container.gateway.name,
    )
    return container


# ---------------------------------------------------------------------------
# Providers para Depends(...)
# ---------------------------------------------------------------------------
def get_container(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_purchase_intent_service(request: Request) -> PurchaseIntentService:
    return get_container(request).purchases


def get_fulfillment_service(request: Request) -> WebhookFulfillmentService:
    return get_container(request).fulfillment


def get_entitlement_service(request: Request) -> EntitlementService:
    return get_container(request).entitlements


def get_token_issuer(request: Request) -> AccessTokenIssuer:
    return get_container(request).tokens


__all__ = [
    "ServiceContainer",
    "assemble_container",
    "build_container",
    "get_container",
    "get_purchase_intent_service",
    "get_fulfillment_service",
    "get_entitlement_service",
    "get_token_issuer",
]

# Fin del archivo backend/app/core/container.py
