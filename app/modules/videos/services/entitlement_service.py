# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/services/entitlement_service.py

Decide si un usuario puede ver un video.

Reglas:
- Video inexistente -> VideoAccessError 404 (VIDEO_NOT_FOUND)
- Dueño -> acceso inmediato, sin consultar compras
- Resto -> existe Purchase completed (vía EntitlementCache)

Es el único camino de decisión: lo usan /videos/{id}/access y la emisión
de tokens de streaming y descarga.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.database import session_scope
from app.shared.errors import VideoAccessError
from app.modules.payments.repositories import PurchaseRepository
from app.modules.videos.models import Video
from app.modules.videos.repositories import VideoRepository
from .entitlement_cache import EntitlementCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessDecision:
    has_access: bool
    is_owner: bool


def video_not_found() -> VideoAccessError:
    return VideoAccessError("Video not found", code="VIDEO_NOT_FOUND", status_code=404)


class EntitlementService:
    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        cache: EntitlementCache,
        purchase_repo: Optional[PurchaseRepository] = None,
        video_repo: Optional[VideoRepository] = None,
    ) -> None:
        self.session_factory = session_factory
        self.cache = cache
        self.purchase_repo = purchase_repo or PurchaseRepository()
        self.video_repo = video_repo or VideoRepository()

    async def get_video(self, video_id: str) -> Video:
        async with session_scope(self.session_factory) as session:
            video = await self.video_repo.get(session, video_id) if video_id else None
        if video is None:
            raise video_not_found()
        return video

    async def check_access(self, user_id: str, video_id: str) -> AccessDecision:
        video = await self.get_video(video_id)
        return await self._decide(user_id, video)

    async def _decide(self, user_id: str, video: Video) -> AccessDecision:
        video_id = video.id
        if video.owner_id == user_id:
            return AccessDecision(has_access=True, is_owner=True)

        async def _has_completed_purchase() -> bool:
            async with session_scope(self.session_factory) as session:
                purchase = await self.purchase_repo.find_completed(session, user_id, video_id)
            return purchase is not None

        has_access = await self.cache.get_or_load(user_id, video_id, _has_completed_purchase)
        return AccessDecision(has_access=has_access, is_owner=False)

    async def require_access(self, user_id: str, video_id: str) -> Video:
        """Como check_access, pero lanza VideoAccessError 403 si no hay acceso."""
        video = await self.get_video(video_id)
        decision = await self._decide(user_id, video)
        if not decision.has_access:
            logger.info("video_access_denied: user_id=%s video_id=%s", user_id, video_id)
            raise VideoAccessError("Video not purchased", code="VIDEO_ACCESS_DENIED", status_code=403)
        return video

    async def get_preview_url(self, video_id: str) -> Optional[str]:
        """Preview público; no requiere compra."""
        video = await self.get_video(video_id)
        return video.preview_url


__all__ = ["EntitlementService", "AccessDecision", "video_not_found"]
