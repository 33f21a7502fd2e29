# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/purchase_intent_service.py

Inicio de compra de un video y consultas del ledger para el comprador.

Flujo de create_intent:
1. Validaciones (video, precio, dueño, compra completada, pending vigente)
2. Lock purchase:{user}:{video} y re-validación bajo el lock
3. INSERT pending + commit (la fila existe antes de llamar a la pasarela)
4. PaymentIntent en la pasarela
5. Guardar gateway_payment_id + caché payment_intent:{id}
6. Liberar el lock siempre

Si la pasarela falla, la fila pasa a failed y se propaga PaymentError
(GATEWAY_ERROR) para que el reintento del usuario no quede bloqueado.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.cache import CacheBackend, LockManager
from app.shared.config.settings_base import BaseAppSettings
from app.shared.database import session_scope
from app.shared.errors import (
    PaymentError,
    StorageError,
    ValidationError,
    already_purchased,
    not_found,
    purchase_in_progress,
)
from app.modules.payments.adapters import PaymentGatewayAdapter
from app.modules.payments.enums import PurchaseStatus
from app.modules.payments.metrics import observe_checkout_started
from app.modules.payments.models import Purchase
from app.modules.payments.repositories import PurchaseRepository
from app.modules.payments.utils.datetime_helpers import ensure_utc, pending_cutoff
from app.modules.payments.utils.price import is_valid_price, to_cents, to_decimal
from app.modules.videos.repositories import VideoRepository

logger = logging.getLogger(__name__)

PAYMENT_INTENT_KEY = "payment_intent:{}"


def purchase_lock_resource(user_id: str, video_id: str) -> str:
    return f"purchase:{user_id}:{video_id}"


def _ensure_cancelable(purchase: Purchase) -> None:
    if purchase.status is not PurchaseStatus.PENDING:
        raise PaymentError(
            "Only pending purchases can be canceled",
            code="INVALID_PURCHASE_STATUS",
            status_code=409,
        )


@dataclass(frozen=True)
class IntentResult:
    client_secret: str
    amount: Decimal
    purchase_id: str


@dataclass(frozen=True)
class PurchaseStatusView:
    """Estado de una compra tal como lo ve el cliente que hace polling."""
    purchase_id: str
    video_id: str
    status: str  # processing | completed | failed
    amount: Decimal
    completed_at: Optional[datetime]

    @classmethod
    def from_purchase(cls, purchase: Purchase) -> "PurchaseStatusView":
        if purchase.status is PurchaseStatus.PENDING:
            status = "processing"
        else:
            status = purchase.status.value
        return cls(
            purchase_id=purchase.id,
            video_id=purchase.video_id,
            status=status,
            amount=purchase.amount,
            completed_at=ensure_utc(purchase.completed_at) if purchase.completed_at else None,
        )


@dataclass(frozen=True)
class PurchasePage:
    items: List[Purchase]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


class PurchaseIntentService:
    """
    Servicio de inicio de compra.

    Se construye una vez en el lifespan con sus dependencias explícitas.
    """

    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        locks: LockManager,
        store: CacheBackend,
        gateway: PaymentGatewayAdapter,
        settings: BaseAppSettings,
        purchase_repo: Optional[PurchaseRepository] = None,
        video_repo: Optional[VideoRepository] = None,
    ) -> None:
        self.session_factory = session_factory
        self.locks = locks
        self.store = store
        self.gateway = gateway
        self.settings = settings
        self.purchase_repo = purchase_repo or PurchaseRepository()
        self.video_repo = video_repo or VideoRepository()

    # ------------------------------------------------------------------ #
    # Creación del intent
    # ------------------------------------------------------------------ #
    async def create_intent(self, user_id: str, video_id: Any) -> IntentResult:
        if not isinstance(video_id, str) or not video_id.strip():
            raise ValidationError("videoId is required", code="INVALID_VIDEO_ID")
        video_id = video_id.strip()

        async with session_scope(self.session_factory) as session:
            video = await self.video_repo.get(session, video_id)
            if video is None:
                raise not_found("Video")
            if not is_valid_price(video.price):
                raise PaymentError("Invalid video price", code="INVALID_PRICE")
            if video.owner_id == user_id:
                raise PaymentError("Cannot purchase own content", code="OWN_CONTENT")
            await self._ensure_not_blocked(session, user_id, video_id)
            amount = to_decimal(video.price)

        resource = purchase_lock_resource(user_id, video_id)
        async with self.locks.hold(resource, self.settings.purchase_lock_ttl_seconds) as token:
            if token is None:
                raise purchase_in_progress()

            # Otro request pudo crear la fila mientras esperábamos el lock
            async with session_scope(self.session_factory) as session:
                await self._ensure_not_blocked(session, user_id, video_id)
                purchase = await self.purchase_repo.create_pending(
                    session,
                    user_id=user_id,
                    video_id=video_id,
                    amount=amount,
                )
                purchase_id = purchase.id

            logger.info(
                "purchase_pending_created: purchase_id=%s user_id=%s video_id=%s amount=%s",
                purchase_id, user_id, video_id, amount,
            )

            metadata = {"purchaseId": purchase_id, "videoId": video_id, "userId": user_id}
            try:
                intent = await self.gateway.create_intent(
                    to_cents(amount),
                    self.settings.currency,
                    metadata,
                )
            except Exception as e:
                await self._mark_failed(purchase_id)
                if isinstance(e, PaymentError):
                    raise
                logger.exception("gateway_create_intent_error: purchase_id=%s", purchase_id)
                raise PaymentError(
                    "Payment gateway error",
                    code="GATEWAY_ERROR",
                    status_code=502,
                ) from e

            async with session_scope(self.session_factory) as session:
                row = await self.purchase_repo.get_for_update(session, purchase_id)
                await self.purchase_repo.bind_gateway_payment_id(
                    session, row, intent.gateway_payment_id
                )

            await self._cache_intent_mapping(intent.gateway_payment_id, metadata)
            observe_checkout_started(self.gateway.name, self.settings.currency)

        logger.info(
            "purchase_intent_created: purchase_id=%s gateway_payment_id=%s user_id=%s",
            purchase_id, intent.gateway_payment_id, user_id,
        )
        return IntentResult(
            client_secret=intent.client_secret,
            amount=amount,
            purchase_id=purchase_id,
        )

    async def _ensure_not_blocked(self, session: AsyncSession, user_id: str, video_id: str) -> None:
        if await self.purchase_repo.find_completed(session, user_id, video_id):
            raise already_purchased()
        cutoff = pending_cutoff(self.settings.purchase_pending_window_minutes)
        if await self.purchase_repo.find_active_pending(session, user_id, video_id, cutoff):
            raise purchase_in_progress()

    async def _mark_failed(self, purchase_id: str) -> None:
        async with session_scope(self.session_factory) as session:
            purchase = await self.purchase_repo.get_for_update(session, purchase_id)
            if purchase is not None:
                await self.purchase_repo.transition(session, purchase, PurchaseStatus.FAILED)
        logger.warning("purchase_marked_failed: purchase_id=%s reason=gateway_error", purchase_id)

    async def _cache_intent_mapping(self, gateway_payment_id: str, metadata: dict) -> None:
        # El ledger ya tiene la correlación; la caché sólo acelera el webhook
        try:
            await self.store.set(
                PAYMENT_INTENT_KEY.format(gateway_payment_id),
                json.dumps(metadata),
                ttl=self.settings.payment_intent_cache_ttl_seconds,
            )
        except StorageError as e:
            logger.warning(
                "payment_intent_cache_failed: gateway_payment_id=%s error=%s",
                gateway_payment_id, e,
            )

    # ------------------------------------------------------------------ #
    # Cancelación por el comprador
    # ------------------------------------------------------------------ #
    async def cancel_purchase(self, user_id: str, purchase_id: str) -> PurchaseStatusView:
        """
        Cancela una compra pending del propio usuario.

        Toma el mismo lock que create_intent: mientras el intent se está
        creando, la cancelación responde "purchase already in progress".
        Si la pasarela rechaza la cancelación (p.ej. ya cobrado), la fila
        queda pending y el webhook la resuelve.
        """
        async with session_scope(self.session_factory) as session:
            purchase = await self._get_owned(session, user_id, purchase_id)
            _ensure_cancelable(purchase)
            video_id = purchase.video_id

        resource = purchase_lock_resource(user_id, video_id)
        async with self.locks.hold(resource, self.settings.purchase_lock_ttl_seconds) as token:
            if token is None:
                raise purchase_in_progress()

            async with session_scope(self.session_factory) as session:
                purchase = await self.purchase_repo.get_for_update(session, purchase_id)
                _ensure_cancelable(purchase)
                gateway_payment_id = purchase.gateway_payment_id

            if gateway_payment_id:
                await self.gateway.cancel_intent(gateway_payment_id)

            async with session_scope(self.session_factory) as session:
                purchase = await self.purchase_repo.get_for_update(session, purchase_id)
                changed = await self.purchase_repo.transition(session, purchase, PurchaseStatus.FAILED)

        logger.info(
            "purchase_canceled: purchase_id=%s user_id=%s changed=%s status=%s",
            purchase_id, user_id, changed, purchase.status,
        )
        return PurchaseStatusView.from_purchase(purchase)

    # ------------------------------------------------------------------ #
    # Consultas
    # ------------------------------------------------------------------ #
    async def verify_purchase(self, user_id: str, purchase_id: str) -> PurchaseStatusView:
        async with session_scope(self.session_factory) as session:
            purchase = await self._get_owned(session, user_id, purchase_id)
        return PurchaseStatusView.from_purchase(purchase)

    async def list_user_purchases(
        self,
        user_id: str,
        *,
        page: int = 1,
        limit: Optional[int] = None,
        status: Optional[str] = None,
    ) -> PurchasePage:
        limit = self._check_paging(page, limit)
        status_filter: Optional[PurchaseStatus] = None
        if status:
            try:
                status_filter = PurchaseStatus(status.lower())
            except ValueError as e:
                raise ValidationError(f"Invalid status filter: {status}", code="INVALID_STATUS") from e

        async with session_scope(self.session_factory) as session:
            items, total = await self.purchase_repo.list_by_user(
                session,
                user_id,
                status=status_filter,
                offset=(page - 1) * limit,
                limit=limit,
            )
        return PurchasePage(items=list(items), total=total, page=page, limit=limit)

    async def list_seller_sales(
        self,
        owner_id: str,
        *,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> PurchasePage:
        limit = self._check_paging(page, limit)
        async with session_scope(self.session_factory) as session:
            items, total = await self.purchase_repo.list_sales_for_owner(
                session,
                owner_id,
                offset=(page - 1) * limit,
                limit=limit,
            )
        return PurchasePage(items=list(items), total=total, page=page, limit=limit)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    async def _get_owned(self, session: AsyncSession, user_id: str, purchase_id: str) -> Purchase:
        purchase = await self.purchase_repo.get(session, purchase_id) if purchase_id else None
        # Una compra ajena se reporta igual que una inexistente
        if purchase is None or purchase.user_id != user_id:
            raise not_found("Purchase")
        return purchase

    def _check_paging(self, page: int, limit: Optional[int]) -> int:
        if limit is None:
            limit = self.settings.page_size_default
        if page < 1:
            raise ValidationError("page must be >= 1", code="INVALID_PAGINATION")
        if limit < 1 or limit > self.settings.page_size_max:
            raise ValidationError(
                f"limit must be between 1 and {self.settings.page_size_max}",
                code="INVALID_PAGINATION",
            )
        return limit


__all__ = [
    "PurchaseIntentService",
    "IntentResult",
    "PurchaseStatusView",
    "PurchasePage",
    "purchase_lock_resource",
    "PAYMENT_INTENT_KEY",
]
