# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/routes/payments.py

Rutas de compra de videos.

Endpoints:
- POST /payments/create-intent
- GET  /payments/verify?purchaseId=
- GET  /payments/history
- GET  /payments/sales
- POST /payments/{purchaseId}/cancel

Los errores de dominio (ValidationError, PaymentError, ...) los traduce el
exception handler global; aquí no se capturan.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.container import get_purchase_intent_service
from app.modules.auth import get_current_user_id
from app.modules.payments.models import Purchase
from app.modules.payments.schemas import (
    CancelPurchaseResponse,
    CreateIntentRequest,
    CreateIntentResponse,
    PageMeta,
    PurchaseListResponse,
    PurchaseOut,
    PurchaseStatusResponse,
)
from app.modules.payments.services import PurchaseIntentService, PurchasePage
from app.modules.payments.utils.datetime_helpers import ensure_utc
from app.shared.errors import ValidationError

router = APIRouter(
    prefix="",
    tags=["payments"],
)


def _purchase_out(purchase: Purchase) -> PurchaseOut:
    return PurchaseOut(
        purchase_id=purchase.id,
        video_id=purchase.video_id,
        user_id=purchase.user_id,
        amount=purchase.amount,
        status=purchase.status.value,
        created_at=ensure_utc(purchase.created_at),
        completed_at=ensure_utc(purchase.completed_at) if purchase.completed_at else None,
    )


def _page_response(page: PurchasePage) -> PurchaseListResponse:
    return PurchaseListResponse(
        items=[_purchase_out(p) for p in page.items],
        meta=PageMeta(total=page.total, limit=page.limit, page=page.page, pages=page.pages),
    )


@router.post(
    "/create-intent",
    response_model=CreateIntentResponse,
    status_code=status.HTTP_200_OK,
    summary="Inicia la compra de un video",
)
async def create_intent(
    payload: CreateIntentRequest,
    user_id: str = Depends(get_current_user_id),
    service: PurchaseIntentService = Depends(get_purchase_intent_service),
) -> CreateIntentResponse:
    result = await service.create_intent(user_id, payload.video_id)
    return CreateIntentResponse(
        client_secret=result.client_secret,
        amount=result.amount,
        purchase_id=result.purchase_id,
    )


@router.get(
    "/verify",
    response_model=PurchaseStatusResponse,
    summary="Estado de compra para polling",
)
async def verify_purchase(
    purchase_id: Optional[str] = Query(default=None, alias="purchaseId"),
    user_id: str = Depends(get_current_user_id),
    service: PurchaseIntentService = Depends(get_purchase_intent_service),
) -> PurchaseStatusResponse:
    """
    pending se reporta como "processing": el cliente sigue consultando
    hasta recibir completed o failed.
    """
    if not purchase_id:
        raise ValidationError("purchaseId is required", code="INVALID_PURCHASE_ID")
    view = await service.verify_purchase(user_id, purchase_id)
    return PurchaseStatusResponse(
        purchase_id=view.purchase_id,
        video_id=view.video_id,
        status=view.status,
        amount=view.amount,
        completed_at=view.completed_at,
    )


@router.get(
    "/history",
    response_model=PurchaseListResponse,
    summary="Historial de compras del usuario",
)
async def purchase_history(
    page: int = Query(default=1),
    limit: Optional[int] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    user_id: str = Depends(get_current_user_id),
    service: PurchaseIntentService = Depends(get_purchase_intent_service),
) -> PurchaseListResponse:
    result = await service.list_user_purchases(
        user_id,
        page=page,
        limit=limit,
        status=status_filter,
    )
    return _page_response(result)


@router.get(
    "/sales",
    response_model=PurchaseListResponse,
    summary="Ventas de los videos del usuario",
)
async def seller_sales(
    page: int = Query(default=1),
    limit: Optional[int] = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    service: PurchaseIntentService = Depends(get_purchase_intent_service),
) -> PurchaseListResponse:
    result = await service.list_seller_sales(user_id, page=page, limit=limit)
    return _page_response(result)


@router.post(
    "/{purchase_id}/cancel",
    response_model=CancelPurchaseResponse,
    summary="Cancela una compra pendiente",
)
async def cancel_purchase(
    purchase_id: str,
    user_id: str = Depends(get_current_user_id),
    service: PurchaseIntentService = Depends(get_purchase_intent_service),
) -> CancelPurchaseResponse:
    view = await service.cancel_purchase(user_id, purchase_id)
    return CancelPurchaseResponse(purchase_id=view.purchase_id, status=view.status)


__all__ = ["router"]

# Fin del archivo backend/app/modules/payments/routes/payments.py
