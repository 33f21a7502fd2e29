# -*- coding: utf-8 -*-
"""
backend/app/shared/redis/client.py

Construcción del store clave-valor compartido.

- Se construye una sola vez en el lifespan de la app y se inyecta en los
  servicios; no hay singleton con conexión perezosa.
- Fail-fast: con REDIS_URL configurado, un PING fallido aborta el arranque.
- Sin REDIS_URL (sólo fuera de producción) se usa MemoryCacheBackend,
  válido únicamente para un proceso.

Autor: Vidmarket
Fecha: 2026-10-19
"""
from __future__ import annotations

import logging
import os

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from app.shared.cache import CacheBackend, MemoryCacheBackend, RedisCacheBackend
from app.shared.config.settings_base import BaseAppSettings
from app.shared.errors import StorageError

logger = logging.getLogger(__name__)


def build_redis_client(redis_url: str, socket_timeout: float = 2.0) -> aioredis.Redis:
    """Cliente redis.asyncio con respuestas decodificadas a str."""
    return aioredis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=socket_timeout,
        socket_timeout=socket_timeout,
    )


async def connect_cache_backend(settings: BaseAppSettings) -> CacheBackend:
    """
    Devuelve el CacheBackend listo para usar según la configuración.

    Raises:
        StorageError: si Redis está configurado pero no responde, o si falta
            REDIS_URL en producción.
    """
    if not settings.redis_url:
        if settings.is_prod:
            raise StorageError("REDIS_URL is required in production")
        logger.warning(
            "RedisClient: REDIS_URL not configured, using in-memory store pid=%d "
            "(locks are NOT shared between processes)",
            os.getpid(),
        )
        return MemoryCacheBackend()

    client = build_redis_client(settings.redis_url, settings.redis_socket_timeout_sec)
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        await client.aclose()
        logger.error("RedisClient: connection failed: %s", e)
        raise StorageError("Key-value store unreachable at startup") from e

    logger.info("RedisClient: connected pid=%d", os.getpid())
    return RedisCacheBackend(client)


__all__ = ["build_redis_client", "connect_cache_backend"]
