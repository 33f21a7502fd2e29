# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/repositories/purchase_repository.py

Ledger de compras (tabla purchases).

Responsabilidades:
- Búsquedas para prevenir compras duplicadas (completed / pending vigente)
- Lectura con bloqueo de fila (SELECT ... FOR UPDATE) para transiciones
- Transiciones de estado pending -> completed | failed
- Listados paginados (historial del comprador, ventas del creador)

Todas las funciones reciben la sesión; la transacción la controla el servicio.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository
from app.modules.payments.enums import PurchaseStatus
from app.modules.payments.models import Purchase
from app.modules.payments.utils.datetime_helpers import truncate_subsecond, utcnow
from app.modules.videos.models import Video


class InvalidTransitionError(Exception):
    """Transición de estado no permitida por la máquina de estados."""


class PurchaseRepository(BaseRepository[Purchase]):
    def __init__(self) -> None:
        super().__init__(Purchase)

    # -----------------------------------------------------------
    # Correlación con la pasarela
    # -----------------------------------------------------------
    async def get_by_gateway_payment_id(
        self,
        session: AsyncSession,
        gateway_payment_id: str,
        *,
        for_update: bool = False,
    ) -> Optional[Purchase]:
        stmt = select(Purchase).where(Purchase.gateway_payment_id == gateway_payment_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def bind_gateway_payment_id(
        self,
        session: AsyncSession,
        purchase: Purchase,
        gateway_payment_id: str,
    ) -> None:
        """Fija gateway_payment_id una sola vez; re-asignar el mismo valor es no-op."""
        if purchase.gateway_payment_id == gateway_payment_id:
            return
        if purchase.gateway_payment_id is not None:
            raise InvalidTransitionError(
                f"purchase {purchase.id} already bound to {purchase.gateway_payment_id}"
            )
        purchase.gateway_payment_id = gateway_payment_id
        await session.flush()

    # -----------------------------------------------------------
    # Prevención de duplicados
    # -----------------------------------------------------------
    async def find_completed(
        self,
        session: AsyncSession,
        user_id: str,
        video_id: str,
    ) -> Optional[Purchase]:
        stmt = select(Purchase).where(
            Purchase.user_id == user_id,
            Purchase.video_id == video_id,
            Purchase.status == PurchaseStatus.COMPLETED,
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def find_active_pending(
        self,
        session: AsyncSession,
        user_id: str,
        video_id: str,
        created_after: datetime,
    ) -> Optional[Purchase]:
        """Pending más reciente creado después de `created_after` (no abandonado)."""
        stmt = (
            select(Purchase)
            .where(
                Purchase.user_id == user_id,
                Purchase.video_id == video_id,
                Purchase.status == PurchaseStatus.PENDING,
                Purchase.created_at > created_after,
            )
            .order_by(Purchase.created_at.desc())
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def create_pending(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        video_id: str,
        amount: Decimal,
    ) -> Purchase:
        return await self.create(
            session,
            user_id=user_id,
            video_id=video_id,
            amount=amount,
            status=PurchaseStatus.PENDING,
        )

    # -----------------------------------------------------------
    # Transiciones
    # -----------------------------------------------------------
    async def transition(
        self,
        session: AsyncSession,
        purchase: Purchase,
        target: PurchaseStatus,
        *,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Aplica pending -> target si la compra sigue pending.

        Returns:
            True si cambió el estado; False si ya estaba en un estado
            terminal (no-op, nunca retrocede).
        """
        if not target.is_terminal:
            raise InvalidTransitionError(f"{target} is not a terminal status")
        if not purchase.status.can_transition_to(target):
            return False

        purchase.status = target
        if target is PurchaseStatus.COMPLETED:
            purchase.completed_at = truncate_subsecond(now or utcnow())
        await session.flush()
        return True

    # -----------------------------------------------------------
    # Listados paginados
    # -----------------------------------------------------------
    async def list_by_user(
        self,
        session: AsyncSession,
        user_id: str,
        *,
        status: Optional[PurchaseStatus] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[Sequence[Purchase], int]:
        """Compras del usuario, más recientes primero, y total sin paginar."""
        conditions = [Purchase.user_id == user_id]
        if status is not None:
            conditions.append(Purchase.status == status)

        total = await session.scalar(select(func.count()).select_from(Purchase).where(*conditions))
        stmt = (
            select(Purchase)
            .where(*conditions)
            .order_by(Purchase.created_at.desc(), Purchase.id)
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all(), int(total or 0)

    async def list_sales_for_owner(
        self,
        session: AsyncSession,
        owner_id: str,
        *,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[Sequence[Purchase], int]:
        """Compras completed de los videos cuyo dueño es `owner_id`."""
        conditions = [
            Video.owner_id == owner_id,
            Purchase.status == PurchaseStatus.COMPLETED,
        ]
        base = select(Purchase).join(Video, Video.id == Purchase.video_id).where(*conditions)

        total = await session.scalar(select(func.count()).select_from(base.subquery()))
        stmt = base.order_by(Purchase.completed_at.desc(), Purchase.id).offset(offset).limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all(), int(total or 0)


__all__ = ["PurchaseRepository", "InvalidTransitionError"]

# Fin del archivo backend/app/modules/payments/repositories/purchase_repository.py
