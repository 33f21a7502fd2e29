# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/lock_manager.py

Exclusión mutua distribuida sobre el store clave-valor.

Contrato:
- acquire(key, ttl) -> token | None
    SET lock:{key} token NX EX ttl; ante conflicto reintenta un número
    acotado de veces con una pausa corta y luego devuelve None.
- release(key, token) -> bool
    Compare-and-delete atómico: sólo borra si el valor sigue siendo el
    token del llamador, así un holder lento no libera un lock que ya
    expiró y fue reasignado.
- hold(key, ttl): context manager que libera en finally.

Todo lock lleva TTL; no existen locks sin expiración.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from .cache_backend import CacheBackend

logger = logging.getLogger(__name__)

LOCK_PREFIX = "lock:"


class LockManager:
    """Locks con dueño (token aleatorio) y expiración sobre un CacheBackend."""

    def __init__(
        self,
        store: CacheBackend,
        *,
        retry_attempts: int = 3,
        retry_delay_ms: int = 200,
    ):
        self._store = store
        self._retry_attempts = max(0, retry_attempts)
        self._retry_delay = max(0, retry_delay_ms) / 1000.0

    @staticmethod
    def _key(resource: str) -> str:
        return f"{LOCK_PREFIX}{resource}"

    async def acquire(
        self,
        resource: str,
        ttl: int,
        *,
        retries: Optional[int] = None,
    ) -> Optional[str]:
        """
        Intenta tomar el lock de `resource` por `ttl` segundos.

        Args:
            resource: nombre lógico, p.ej. "purchase:{user}:{video}"
            ttl: expiración en segundos (> 0)
            retries: reintentos tras el primer intento; None usa el default

        Returns:
            token de propiedad o None si no se obtuvo
        """
        if ttl <= 0:
            raise ValueError("lock ttl must be positive")

        token = secrets.token_hex(16)
        key = self._key(resource)
        attempts = 1 + (self._retry_attempts if retries is None else max(0, retries))

        for attempt in range(attempts):
            if await self._store.set_if_absent(key, token, ttl):
                logger.debug("lock_acquired: resource=%s attempt=%d", resource, attempt + 1)
                return token
            if attempt < attempts - 1 and self._retry_delay:
                await asyncio.sleep(self._retry_delay)

        logger.info("lock_busy: resource=%s attempts=%d", resource, attempts)
        return None

    async def release(self, resource: str, token: str) -> bool:
        """Libera sólo si `token` sigue siendo el dueño. False si no lo era."""
        released = await self._store.compare_and_delete(self._key(resource), token)
        if not released:
            logger.warning("lock_release_skipped: resource=%s (expired or reassigned)", resource)
        return released

    @asynccontextmanager
    async def hold(
        self,
        resource: str,
        ttl: int,
        *,
        retries: Optional[int] = None,
    ) -> AsyncIterator[Optional[str]]:
        """
        Context manager: entrega el token (o None si está ocupado) y libera al salir.

            async with locks.hold("purchase:u:v", 300) as token:
                if token is None:
                    raise purchase_in_progress()
                ...
        """
        token = await self.acquire(resource, ttl, retries=retries)
        try:
            yield token
        finally:
            if token is not None:
                await self.release(resource, token)


__all__ = ["LockManager", "LOCK_PREFIX"]
