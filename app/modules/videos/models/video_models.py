# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/models/video_models.py

Modelo ORM de la tabla videos (sólo lectura desde este servicio).

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base
from app.modules.payments.utils.datetime_helpers import utcnow


class Video(Base):
    """Video publicado por un creador."""

    __tablename__ = "videos"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    owner_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        doc="ID del creador; el dueño siempre tiene acceso.",
    )

    preview_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    full_video_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        Index("ix_videos_owner_id", "owner_id"),
    )

    def __repr__(self) -> str:
        return f"<Video id={self.id} owner_id={self.owner_id} price={self.price}>"


__all__ = ["Video"]
