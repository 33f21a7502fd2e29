# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/services/entitlement_cache.py

Caché read-through de "¿el usuario compró este video?".

Key: entitlement:{user_id}:{video_id} -> "true" | "false" (JSON), TTL 1h.

invalidate() no borra la entrada: la reemplaza por "null" (vacante) con
el mismo TTL. Un lector que cargó "false" antes de la transición escribe
con SET NX, así que no puede pisar la vacante ni resucitar un negativo.
"true" se escribe siempre: una compra completada no vuelve atrás.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import json
import logging
from typing import Awaitable, Callable, Optional

from app.shared.cache import CacheBackend

logger = logging.getLogger(__name__)

ENTITLEMENT_KEY = "entitlement:{}:{}"
VACANT = "null"


class EntitlementCache:
    def __init__(self, store: CacheBackend, *, ttl_seconds: int = 3600):
        self._store = store
        self._ttl = ttl_seconds

    @staticmethod
    def key(user_id: str, video_id: str) -> str:
        return ENTITLEMENT_KEY.format(user_id, video_id)

    async def get_or_load(
        self,
        user_id: str,
        video_id: str,
        loader: Callable[[], Awaitable[bool]],
    ) -> bool:
        key = self.key(user_id, video_id)
        cached = await self._read(key)
        if cached is not None:
            return cached

        value = bool(await loader())
        if value:
            await self._store.set(key, "true", ttl=self._ttl)
        elif not await self._store.set_if_absent(key, "false", self._ttl):
            logger.debug("entitlement_cache_negative_skipped: key=%s", key)
        return value

    async def _read(self, key: str) -> Optional[bool]:
        raw = await self._store.get(key)
        if raw is None or raw == VACANT:
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            value = None
        if not isinstance(value, bool):
            logger.warning("entitlement_cache_corrupt: key=%s value=%r", key, raw)
            await self._store.delete(key)
            return None
        return value

    async def invalidate(self, user_id: str, video_id: str) -> None:
        await self._store.set(self.key(user_id, video_id), VACANT, ttl=self._ttl)
        logger.debug("entitlement_cache_invalidated: user_id=%s video_id=%s", user_id, video_id)


__all__ = ["EntitlementCache", "ENTITLEMENT_KEY"]
