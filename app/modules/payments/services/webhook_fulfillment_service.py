# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/webhook_fulfillment_service.py

Fulfillment de compras a partir de webhooks de la pasarela.

Protocolo (idempotente ante reentregas y entregas concurrentes):
1. verify_event: firma inválida o ausente -> WebhookSignatureError (HTTP 400)
2. Lock fulfillment:{gateway_payment_id} sin reintentos; ocupado -> "in_progress"
3. Marker fulfillment:done:{gateway_payment_id}; presente -> "duplicate"
4. Correlación: gateway_payment_id en el ledger; si aún no está guardado,
   caché payment_intent:{id} o metadata.purchaseId (y se fija el id)
5. SELECT ... FOR UPDATE y transición sólo desde pending
6. Tras el commit: invalidación de EntitlementCache y luego el marker
7. Liberar el lock siempre

Los errores de persistencia se registran y se devuelven como
{"status": "error"}; la ruta responde 200 igualmente y la pasarela no
reintenta en bucle. Cada outcome se cuenta en Prometheus
(payments_webhook_outcome_total, payments_fulfillment_errors_total).

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.cache import CacheBackend, LockManager
from app.shared.config.settings_base import BaseAppSettings
from app.shared.database import session_scope
from app.shared.errors import StorageError
from app.modules.payments.adapters.gateway_adapter import (
    FAILURE_EVENTS,
    NOOP_EVENTS,
    SUCCESS_EVENTS,
    GatewayEvent,
    PaymentGatewayAdapter,
    WebhookSignatureError,
)
from app.modules.payments.enums import PurchaseStatus
from app.modules.payments.metrics import (
    observe_amount_mismatch,
    observe_fulfillment_error,
    observe_purchase_status,
    observe_webhook_outcome,
    observe_webhook_received,
    observe_webhook_verified,
)
from app.modules.payments.models import Purchase
from app.modules.payments.repositories import PurchaseRepository
from app.modules.payments.utils.price import to_cents
from app.modules.videos.services.entitlement_cache import EntitlementCache
from .purchase_intent_service import PAYMENT_INTENT_KEY

logger = logging.getLogger(__name__)

FULFILLMENT_DONE_KEY = "fulfillment:done:{}"


def fulfillment_lock_resource(gateway_payment_id: str) -> str:
    return f"fulfillment:{gateway_payment_id}"


def _target_status(event_type: str) -> Optional[PurchaseStatus]:
    if event_type in SUCCESS_EVENTS:
        return PurchaseStatus.COMPLETED
    if event_type in FAILURE_EVENTS:
        return PurchaseStatus.FAILED
    return None


class WebhookFulfillmentService:
    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        locks: LockManager,
        store: CacheBackend,
        gateway: PaymentGatewayAdapter,
        entitlement_cache: EntitlementCache,
        settings: BaseAppSettings,
        purchase_repo: Optional[PurchaseRepository] = None,
    ) -> None:
        self.session_factory = session_factory
        self.locks = locks
        self.store = store
        self.gateway = gateway
        self.entitlement_cache = entitlement_cache
        self.settings = settings
        self.purchase_repo = purchase_repo or PurchaseRepository()

    @property
    def provider(self) -> str:
        return self.gateway.name

    async def handle(self, raw_body: bytes, signature_header: Optional[str]) -> Dict[str, Any]:
        """
        Punto de entrada del webhook.

        Raises:
            WebhookSignatureError: única excepción que sale de aquí.
        """
        started = time.perf_counter()
        observe_webhook_received(self.provider)
        try:
            event = self.gateway.verify_event(raw_body, signature_header)
        except WebhookSignatureError:
            observe_webhook_verified(self.provider, "failure", time.perf_counter() - started)
            raise
        observe_webhook_verified(self.provider, "success", time.perf_counter() - started)

        logger.info(
            "webhook_received: event_id=%s type=%s gateway_payment_id=%s",
            event.event_id, event.event_type, event.gateway_payment_id,
        )
        result = await self.process_event(event)
        observe_webhook_outcome(self.provider, result["status"])
        return result

    async def process_event(self, event: GatewayEvent) -> Dict[str, Any]:
        handled = SUCCESS_EVENTS | FAILURE_EVENTS | NOOP_EVENTS
        if event.event_type not in handled:
            logger.info("webhook_ignored: event_id=%s type=%s", event.event_id, event.event_type)
            return {"status": "ignored", "reason": "unhandled_event_type"}

        gateway_payment_id = event.gateway_payment_id
        if not gateway_payment_id:
            logger.warning("webhook_missing_payment_id: event_id=%s", event.event_id)
            return {"status": "ignored", "reason": "missing_payment_id"}

        resource = fulfillment_lock_resource(gateway_payment_id)
        try:
            token = await self.locks.acquire(
                resource,
                self.settings.fulfillment_lock_ttl_seconds,
                retries=0,
            )
        except StorageError as e:
            logger.error("fulfillment_lock_error: gateway_payment_id=%s error=%s", gateway_payment_id, e)
            observe_fulfillment_error(self.provider, "storage_unavailable")
            return {"status": "error", "reason": "storage_unavailable"}

        if token is None:
            logger.info("fulfillment_in_progress: gateway_payment_id=%s", gateway_payment_id)
            return {"status": "in_progress"}

        try:
            if await self.store.exists(FULFILLMENT_DONE_KEY.format(gateway_payment_id)):
                logger.info("fulfillment_duplicate: gateway_payment_id=%s", gateway_payment_id)
                return {"status": "duplicate"}
            return await self._fulfill(event)
        except (StorageError, SQLAlchemyError) as e:
            logger.error(
                "fulfillment_failed: event_id=%s gateway_payment_id=%s error=%s",
                event.event_id, gateway_payment_id, e,
            )
            observe_fulfillment_error(self.provider, "processing_failed")
            return {"status": "error", "reason": "processing_failed"}
        except Exception:
            # El webhook se reconoce igual; la alerta sale de la métrica
            logger.exception(
                "fulfillment_unexpected_error: event_id=%s gateway_payment_id=%s",
                event.event_id, gateway_payment_id,
            )
            observe_fulfillment_error(self.provider, "unexpected")
            return {"status": "error", "reason": "processing_failed"}
        finally:
            try:
                await self.locks.release(resource, token)
            except StorageError as e:
                # El lock expira solo por TTL
                logger.error("fulfillment_lock_release_failed: resource=%s error=%s", resource, e)

    async def _fulfill(self, event: GatewayEvent) -> Dict[str, Any]:
        gateway_payment_id = event.gateway_payment_id
        target = _target_status(event.event_type)

        async with session_scope(self.session_factory) as session:
            purchase = await self._resolve_purchase(session, event)
            if purchase is None:
                logger.warning(
                    "fulfillment_purchase_not_found: gateway_payment_id=%s purchase_id=%s",
                    gateway_payment_id, event.purchase_id,
                )
                return {"status": "ignored", "reason": "purchase_not_found"}

            purchase_id = purchase.id
            user_id = purchase.user_id
            video_id = purchase.video_id
            current = purchase.status

            if target is None:
                # payment_intent.processing: nada que persistir
                if current is PurchaseStatus.PENDING:
                    return {"status": "noop", "purchase_id": purchase_id}
                return {"status": "ignored", "reason": "not_pending", "purchase_id": purchase_id}

            if current is PurchaseStatus.PENDING and target is PurchaseStatus.COMPLETED:
                rejection = self._check_amount(event, purchase)
                if rejection is not None:
                    return rejection

            if current is PurchaseStatus.PENDING:
                await self.purchase_repo.transition(session, purchase, target)

        if current is not PurchaseStatus.PENDING:
            logger.info(
                "fulfillment_skipped: purchase_id=%s status=%s event=%s",
                purchase_id, current, event.event_type,
            )
            if current is not target:
                return {"status": "ignored", "reason": "not_pending", "purchase_id": purchase_id}
            # Ya aplicado antes (marker perdido): se repara caché y marker
            await self._after_transition(gateway_payment_id, target, user_id, video_id)
            return {"status": "duplicate", "purchase_id": purchase_id}

        observe_purchase_status(target.value)
        await self._after_transition(gateway_payment_id, target, user_id, video_id)
        logger.info(
            "purchase_fulfilled: purchase_id=%s gateway_payment_id=%s status=%s user_id=%s video_id=%s",
            purchase_id, gateway_payment_id, target, user_id, video_id,
        )
        return {"status": "processed", "purchase_id": purchase_id, "purchase_status": target.value}

    def _check_amount(self, event: GatewayEvent, purchase: Purchase) -> Optional[Dict[str, Any]]:
        if event.amount_malformed:
            logger.error(
                "fulfillment_amount_invalid: purchase_id=%s event_id=%s",
                purchase.id, event.event_id,
            )
            observe_fulfillment_error(self.provider, "invalid_amount")
            return {"status": "rejected", "reason": "invalid_amount", "purchase_id": purchase.id}
        if event.amount is None:
            return None
        expected = to_cents(purchase.amount)
        if event.amount != expected:
            logger.error(
                "fulfillment_amount_mismatch: purchase_id=%s expected=%d received=%d",
                purchase.id, expected, event.amount,
            )
            observe_amount_mismatch(self.provider)
            return {"status": "rejected", "reason": "amount_mismatch", "purchase_id": purchase.id}
        return None

    async def _after_transition(
        self,
        gateway_payment_id: str,
        target: PurchaseStatus,
        user_id: str,
        video_id: str,
    ) -> None:
        """
        Invalida la caché y luego escribe el marker, cada paso por separado.

        Sin invalidación no se escribe el marker: la reentrega vuelve a pasar
        por el ledger y reintenta la invalidación.
        """
        try:
            await self.entitlement_cache.invalidate(user_id, video_id)
        except StorageError as e:
            logger.error(
                "entitlement_invalidation_failed: user_id=%s video_id=%s error=%s",
                user_id, video_id, e,
            )
            observe_fulfillment_error(self.provider, "cache_invalidation_failed")
            return

        try:
            await self.store.set(
                FULFILLMENT_DONE_KEY.format(gateway_payment_id),
                target.value,
                ttl=self.settings.fulfillment_marker_ttl_seconds,
            )
        except StorageError as e:
            # La idempotencia sigue garantizada por el ledger
            logger.error(
                "fulfillment_marker_write_failed: gateway_payment_id=%s error=%s",
                gateway_payment_id, e,
            )
            observe_fulfillment_error(self.provider, "marker_write_failed")

    async def _resolve_purchase(self, session: AsyncSession, event: GatewayEvent) -> Optional[Purchase]:
        gateway_payment_id = event.gateway_payment_id
        purchase = await self.purchase_repo.get_by_gateway_payment_id(
            session, gateway_payment_id, for_update=True
        )
        if purchase is not None:
            return purchase

        # El webhook llegó antes de que se guardara el gateway_payment_id
        purchase_id = await self._cached_purchase_id(gateway_payment_id) or event.purchase_id
        if not purchase_id:
            return None

        purchase = await self.purchase_repo.get_for_update(session, purchase_id)
        if purchase is None:
            return None
        if purchase.gateway_payment_id not in (None, gateway_payment_id):
            logger.error(
                "fulfillment_correlation_conflict: purchase_id=%s bound=%s received=%s",
                purchase_id, purchase.gateway_payment_id, gateway_payment_id,
            )
            return None

        await self.purchase_repo.bind_gateway_payment_id(session, purchase, gateway_payment_id)
        logger.info(
            "fulfillment_bound_by_metadata: purchase_id=%s gateway_payment_id=%s",
            purchase_id, gateway_payment_id,
        )
        return purchase

    async def _cached_purchase_id(self, gateway_payment_id: str) -> Optional[str]:
        raw = await self.store.get(PAYMENT_INTENT_KEY.format(gateway_payment_id))
        if raw is None:
            return None
        try:
            return json.loads(raw).get("purchaseId")
        except (ValueError, AttributeError):
            logger.warning("payment_intent_cache_corrupt: gateway_payment_id=%s", gateway_payment_id)
            return None


__all__ = ["WebhookFulfillmentService", "FULFILLMENT_DONE_KEY", "fulfillment_lock_resource"]
