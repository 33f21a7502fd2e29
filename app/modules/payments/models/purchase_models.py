# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/models/purchase_models.py

Modelo ORM para la tabla purchases (ledger de compras).

Reglas que refleja el esquema:
- gateway_payment_id único (clave de correlación de webhooks).
- A lo sumo una compra completed por (user_id, video_id): índice único parcial.
- Nunca se borran filas; es el registro de auditoría.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base
from app.modules.payments.enums import PurchaseStatus
from app.modules.payments.utils.datetime_helpers import utcnow


def _new_purchase_id() -> str:
    return str(uuid.uuid4())


class Purchase(Base):
    """Compra de acceso a un video por un usuario."""

    __tablename__ = "purchases"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_purchase_id)

    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        doc="ID del comprador (emitido por el servicio de identidad).",
    )

    video_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("videos.id", ondelete="RESTRICT"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Precio cobrado; inmutable tras la creación.",
    )

    status: Mapped[PurchaseStatus] = mapped_column(
        PurchaseStatus.as_db_enum(),
        nullable=False,
        default=PurchaseStatus.PENDING,
    )

    gateway_payment_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        doc="ID del PaymentIntent en la pasarela; se fija una sola vez.",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="Se fija exactamente una vez, al pasar a completed (sin fracción de segundo).",
    )

    __table_args__ = (
        Index("ix_purchases_user_id", "user_id"),
        Index("ix_purchases_video_id", "video_id"),
        Index("ix_purchases_user_video", "user_id", "video_id"),
        Index(
            "uq_purchases_user_video_completed",
            "user_id",
            "video_id",
            unique=True,
            postgresql_where=text("status = 'completed'"),
            sqlite_where=text("status = 'completed'"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Purchase id={self.id} user_id={self.user_id} video_id={self.video_id} "
            f"status={self.status} amount={self.amount} gateway_payment_id={self.gateway_payment_id}>"
        )


__all__ = ["Purchase"]
