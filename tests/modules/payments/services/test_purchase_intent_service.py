# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/services/test_purchase_intent_service.py

Tests de PurchaseIntentService.

Se valida:
- Orden de validaciones (videoId, video, precio, dueño, compra previa).
- Creación del pending antes de llamar a la pasarela y correlación por
  gateway_payment_id.
- Exclusión mutua: 50 solicitudes simultáneas producen una sola compra.
- Fallo de pasarela: la fila queda failed y el usuario puede reintentar.
- Cancelación, verificación (polling) y listados paginados.

Autor: Vidmarket
Fecha: 2026-10-19
"""

import asyncio
import json
from datetime import timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from app.modules.payments.adapters import EVENT_PAYMENT_SUCCEEDED
from app.modules.payments.enums import PurchaseStatus
from app.modules.payments.models import Purchase
from app.modules.payments.repositories import PurchaseRepository
from app.modules.payments.services import IntentResult
from app.modules.payments.utils.datetime_helpers import utcnow
from app.shared.errors import PaymentError, ValidationError

BUYER = "buyer-1"
OTHER_BUYER = "buyer-2"
CREATOR = "creator-1"
VIDEO = "vid-1"


async def _load(session_factory, purchase_id):
    async with session_factory() as session:
        return await session.get(Purchase, purchase_id)


async def _count(session_factory, user_id, video_id):
    async with session_factory() as session:
        return await session.scalar(
            select(func.count()).select_from(Purchase).where(
                Purchase.user_id == user_id,
                Purchase.video_id == video_id,
            )
        )


async def _wait_for_pending(session_factory, user_id, video_id, timeout=2.0):
    """Espera a que create_intent haya insertado el pending (antes de la pasarela)."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        async with session_factory() as session:
            purchase_id = await session.scalar(
                select(Purchase.id).where(
                    Purchase.user_id == user_id,
                    Purchase.video_id == video_id,
                    Purchase.status == PurchaseStatus.PENDING,
                )
            )
        if purchase_id is not None:
            return purchase_id
        await asyncio.sleep(0.01)
    raise AssertionError("pending purchase was not created")


async def _insert(session_factory, **kwargs):
    async with session_factory() as session:
        purchase = await PurchaseRepository().create(session, **kwargs)
        await session.commit()
        return purchase


class TestCreateIntentValidation:
    """Validaciones previas a cualquier escritura."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("video_id", [None, "", "   ", 123])
    async def test_missing_video_id(self, container, video_id):
        with pytest.raises(ValidationError) as exc:
            await container.purchases.create_intent(BUYER, video_id)
        assert exc.value.code == "INVALID_VIDEO_ID"
        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_video(self, container, gateway):
        with pytest.raises(ValidationError) as exc:
            await container.purchases.create_intent(BUYER, "does-not-exist")
        assert exc.value.code == "VIDEO_NOT_FOUND"
        assert exc.value.status_code == 404
        assert gateway.intents == []

    @pytest.mark.asyncio
    async def test_invalid_price(self, container, gateway):
        with pytest.raises(PaymentError) as exc:
            await container.purchases.create_intent(BUYER, "vid-free")
        assert exc.value.code == "INVALID_PRICE"
        assert gateway.intents == []

    @pytest.mark.asyncio
    async def test_owner_cannot_buy_own_video(self, container, session_factory):
        with pytest.raises(PaymentError) as exc:
            await container.purchases.create_intent(CREATOR, VIDEO)
        assert exc.value.code == "OWN_CONTENT"
        assert await _count(session_factory, CREATOR, VIDEO) == 0

    @pytest.mark.asyncio
    async def test_already_purchased(self, container, session_factory):
        await _insert(
            session_factory,
            user_id=BUYER,
            video_id=VIDEO,
            amount=Decimal("9.99"),
            status=PurchaseStatus.COMPLETED,
            completed_at=utcnow().replace(microsecond=0),
        )
        with pytest.raises(PaymentError) as exc:
            await container.purchases.create_intent(BUYER, VIDEO)
        assert exc.value.code == "ALREADY_PURCHASED"
        assert exc.value.status_code == 409

    @pytest.mark.asyncio
    async def test_recent_pending_blocks_new_intent(self, container, session_factory):
        await _insert(
            session_factory,
            user_id=BUYER,
            video_id=VIDEO,
            amount=Decimal("9.99"),
            status=PurchaseStatus.PENDING,
        )
        with pytest.raises(PaymentError) as exc:
            await container.purchases.create_intent(BUYER, VIDEO)
        assert exc.value.code == "PURCHASE_IN_PROGRESS"

    @pytest.mark.asyncio
    async def test_abandoned_pending_does_not_block(self, container, session_factory):
        """Un pending de más de 30 minutos se considera abandonado."""
        await _insert(
            session_factory,
            user_id=BUYER,
            video_id=VIDEO,
            amount=Decimal("9.99"),
            status=PurchaseStatus.PENDING,
            created_at=utcnow() - timedelta(minutes=31),
        )
        result = await container.purchases.create_intent(BUYER, VIDEO)
        assert isinstance(result, IntentResult)
        assert await _count(session_factory, BUYER, VIDEO) == 2


class TestCreateIntent:
    @pytest.mark.asyncio
    async def test_creates_pending_purchase_and_intent(self, container, gateway, store, session_factory):
        result = await container.purchases.create_intent(BUYER, VIDEO)

        assert result.amount == Decimal("9.99")
        assert result.client_secret == "pi_test_1_secret_abc"

        # La pasarela recibe centavos y la metadata de correlación
        assert gateway.intents[0]["amount"] == 999
        assert gateway.intents[0]["currency"] == "usd"
        assert gateway.intents[0]["metadata"] == {
            "purchaseId": result.purchase_id,
            "videoId": VIDEO,
            "userId": BUYER,
        }

        purchase = await _load(session_factory, result.purchase_id)
        assert purchase.status is PurchaseStatus.PENDING
        assert purchase.amount == Decimal("9.99")
        assert purchase.gateway_payment_id == "pi_test_1"
        assert purchase.completed_at is None

        cached = json.loads(await store.get("payment_intent:pi_test_1"))
        assert cached["purchaseId"] == result.purchase_id

    @pytest.mark.asyncio
    async def test_lock_released_after_success(self, container, store):
        await container.purchases.create_intent(BUYER, VIDEO)
        assert not await store.exists(f"lock:purchase:{BUYER}:{VIDEO}")

    @pytest.mark.asyncio
    async def test_strips_video_id(self, container):
        result = await container.purchases.create_intent(BUYER, f"  {VIDEO} ")
        view = await container.purchases.verify_purchase(BUYER, result.purchase_id)
        assert view.video_id == VIDEO

    @pytest.mark.asyncio
    async def test_fifty_concurrent_requests_create_one_purchase(self, container, gateway, session_factory):
        gateway.delay = 0.05

        results = await asyncio.gather(
            *[container.purchases.create_intent(BUYER, VIDEO) for _ in range(50)],
            return_exceptions=True,
        )

        successes = [r for r in results if isinstance(r, IntentResult)]
        failures = [r for r in results if not isinstance(r, IntentResult)]

        assert len(successes) == 1
        assert len(failures) == 49
        assert all(isinstance(f, PaymentError) for f in failures)
        assert {f.code for f in failures} == {"PURCHASE_IN_PROGRESS"}
        assert len(gateway.intents) == 1
        assert await _count(session_factory, BUYER, VIDEO) == 1

    @pytest.mark.asyncio
    async def test_different_users_do_not_block_each_other(self, container):
        first, second = await asyncio.gather(
            container.purchases.create_intent(BUYER, VIDEO),
            container.purchases.create_intent(OTHER_BUYER, VIDEO),
        )
        assert first.purchase_id != second.purchase_id


class TestGatewayFailure:
    @pytest.mark.asyncio
    async def test_gateway_payment_error_marks_failed(self, container, gateway, session_factory, store):
        gateway.fail_with = PaymentError("Payment gateway error", code="GATEWAY_ERROR", status_code=502)

        with pytest.raises(PaymentError) as exc:
            await container.purchases.create_intent(BUYER, VIDEO)
        assert exc.value.code == "GATEWAY_ERROR"

        async with session_factory() as session:
            rows = (await session.execute(select(Purchase))).scalars().all()
        assert len(rows) == 1
        assert rows[0].status is PurchaseStatus.FAILED
        assert rows[0].gateway_payment_id is None
        assert not await store.exists(f"lock:purchase:{BUYER}:{VIDEO}")

    @pytest.mark.asyncio
    async def test_unexpected_gateway_error_is_wrapped(self, container, gateway):
        gateway.fail_with = RuntimeError("connection reset")

        with pytest.raises(PaymentError) as exc:
            await container.purchases.create_intent(BUYER, VIDEO)
        assert exc.value.code == "GATEWAY_ERROR"
        assert exc.value.status_code == 502
        assert isinstance(exc.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_retry_after_gateway_failure(self, container, gateway, session_factory):
        gateway.fail_with = RuntimeError("timeout")
        with pytest.raises(PaymentError):
            await container.purchases.create_intent(BUYER, VIDEO)

        gateway.fail_with = None
        result = await container.purchases.create_intent(BUYER, VIDEO)

        purchase = await _load(session_factory, result.purchase_id)
        assert purchase.status is PurchaseStatus.PENDING
        assert await _count(session_factory, BUYER, VIDEO) == 2


class TestCancelPurchase:
    @pytest.mark.asyncio
    async def test_cancel_pending(self, container, gateway, session_factory):
        created = await container.purchases.create_intent(BUYER, VIDEO)

        view = await container.purchases.cancel_purchase(BUYER, created.purchase_id)

        assert view.status == "failed"
        assert gateway.canceled == ["pi_test_1"]
        purchase = await _load(session_factory, created.purchase_id)
        assert purchase.status is PurchaseStatus.FAILED

    @pytest.mark.asyncio
    async def test_cancel_twice_is_rejected(self, container):
        created = await container.purchases.create_intent(BUYER, VIDEO)
        await container.purchases.cancel_purchase(BUYER, created.purchase_id)

        with pytest.raises(PaymentError) as exc:
            await container.purchases.cancel_purchase(BUYER, created.purchase_id)
        assert exc.value.code == "INVALID_PURCHASE_STATUS"
        assert exc.value.status_code == 409

    @pytest.mark.asyncio
    async def test_cancel_foreign_purchase_is_not_found(self, container, gateway):
        created = await container.purchases.create_intent(BUYER, VIDEO)

        with pytest.raises(ValidationError) as exc:
            await container.purchases.cancel_purchase(OTHER_BUYER, created.purchase_id)
        assert exc.value.code == "PURCHASE_NOT_FOUND"
        assert gateway.canceled == []

    @pytest.mark.asyncio
    async def test_new_intent_allowed_after_cancel(self, container):
        created = await container.purchases.create_intent(BUYER, VIDEO)
        await container.purchases.cancel_purchase(BUYER, created.purchase_id)

        again = await container.purchases.create_intent(BUYER, VIDEO)
        assert again.purchase_id != created.purchase_id

    @pytest.mark.asyncio
    async def test_cancel_while_intent_is_being_created(
        self, container, gateway, deliver, event_body, session_factory
    ):
        gateway.delay = 0.5
        creating = asyncio.create_task(container.purchases.create_intent(BUYER, VIDEO))
        purchase_id = await _wait_for_pending(session_factory, BUYER, VIDEO)

        with pytest.raises(PaymentError) as exc:
            await container.purchases.cancel_purchase(BUYER, purchase_id)
        assert exc.value.code == "PURCHASE_IN_PROGRESS"

        created = await creating
        assert created.client_secret == "pi_test_1_secret_abc"
        assert (await _load(session_factory, purchase_id)).status is PurchaseStatus.PENDING

        # El comprador paga con el client_secret recibido
        result = await deliver(event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999))
        assert result["status"] == "processed"
        decision = await container.entitlements.check_access(BUYER, VIDEO)
        assert decision.has_access is True

    @pytest.mark.asyncio
    async def test_cancel_refused_by_gateway_keeps_pending(
        self, container, gateway, deliver, event_body, session_factory
    ):
        created = await container.purchases.create_intent(BUYER, VIDEO)
        gateway.cancel_fail_with = PaymentError(
            "This PaymentIntent has already succeeded", code="GATEWAY_ERROR", status_code=502
        )

        with pytest.raises(PaymentError) as exc:
            await container.purchases.cancel_purchase(BUYER, created.purchase_id)
        assert exc.value.code == "GATEWAY_ERROR"
        assert (await _load(session_factory, created.purchase_id)).status is PurchaseStatus.PENDING

        result = await deliver(event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999))
        assert result["status"] == "processed"
        assert (await container.entitlements.check_access(BUYER, VIDEO)).has_access is True

    @pytest.mark.asyncio
    async def test_cancel_releases_purchase_lock(self, container, store):
        created = await container.purchases.create_intent(BUYER, VIDEO)

        await container.purchases.cancel_purchase(BUYER, created.purchase_id)

        assert not await store.exists(f"lock:purchase:{BUYER}:{VIDEO}")


class TestVerifyPurchase:
    @pytest.mark.asyncio
    async def test_pending_reported_as_processing(self, container):
        created = await container.purchases.create_intent(BUYER, VIDEO)

        view = await container.purchases.verify_purchase(BUYER, created.purchase_id)

        assert view.status == "processing"
        assert view.amount == Decimal("9.99")
        assert view.completed_at is None

    @pytest.mark.asyncio
    async def test_completed_after_webhook(self, container, deliver, event_body):
        created = await container.purchases.create_intent(BUYER, VIDEO)
        await deliver(event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999))

        view = await container.purchases.verify_purchase(BUYER, created.purchase_id)

        assert view.status == "completed"
        assert view.completed_at is not None
        assert view.completed_at.tzinfo == timezone.utc
        assert view.completed_at.microsecond == 0

    @pytest.mark.asyncio
    async def test_unknown_purchase(self, container):
        with pytest.raises(ValidationError) as exc:
            await container.purchases.verify_purchase(BUYER, "nope")
        assert exc.value.status_code == 404


class TestListings:
    @pytest.mark.asyncio
    async def test_user_history_pagination(self, container):
        await container.purchases.create_intent(BUYER, VIDEO)
        await container.purchases.create_intent(BUYER, "vid-2")

        page = await container.purchases.list_user_purchases(BUYER, page=1, limit=1)

        assert page.total == 2
        assert page.pages == 2
        assert len(page.items) == 1

        second = await container.purchases.list_user_purchases(BUYER, page=2, limit=1)
        assert len(second.items) == 1
        assert page.items[0].id != second.items[0].id
        # Más recientes primero
        assert page.items[0].video_id == "vid-2"

    @pytest.mark.asyncio
    async def test_user_history_status_filter(self, container, deliver, event_body):
        await container.purchases.create_intent(BUYER, VIDEO)
        await container.purchases.create_intent(BUYER, "vid-2")
        await deliver(event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999))

        completed = await container.purchases.list_user_purchases(BUYER, status="completed")
        pending = await container.purchases.list_user_purchases(BUYER, status="PENDING")

        assert completed.total == 1
        assert completed.items[0].video_id == VIDEO
        assert pending.total == 1
        assert pending.items[0].video_id == "vid-2"

    @pytest.mark.asyncio
    async def test_history_excludes_other_users(self, container):
        await container.purchases.create_intent(OTHER_BUYER, VIDEO)
        page = await container.purchases.list_user_purchases(BUYER)
        assert page.total == 0
        assert page.items == []
        assert page.limit == 10

    @pytest.mark.asyncio
    async def test_invalid_status_filter(self, container):
        with pytest.raises(ValidationError) as exc:
            await container.purchases.list_user_purchases(BUYER, status="refunded")
        assert exc.value.code == "INVALID_STATUS"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, 101)])
    async def test_invalid_pagination(self, container, page, limit):
        with pytest.raises(ValidationError) as exc:
            await container.purchases.list_user_purchases(BUYER, page=page, limit=limit)
        assert exc.value.code == "INVALID_PAGINATION"

    @pytest.mark.asyncio
    async def test_seller_sales_only_completed(self, container, deliver, event_body):
        await container.purchases.create_intent(BUYER, VIDEO)
        await container.purchases.create_intent(OTHER_BUYER, VIDEO)
        await deliver(event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999))

        sales = await container.purchases.list_seller_sales(CREATOR)

        assert sales.total == 1
        assert sales.items[0].user_id == BUYER
        assert sales.items[0].status is PurchaseStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_seller_sales_for_non_creator(self, container, deliver, event_body):
        await container.purchases.create_intent(BUYER, VIDEO)
        await deliver(event_body(EVENT_PAYMENT_SUCCEEDED, "pi_test_1", amount=999))

        sales = await container.purchases.list_seller_sales(BUYER)
        assert sales.total == 0


# Fin del archivo backend/tests/modules/payments/services/test_purchase_intent_service.py
