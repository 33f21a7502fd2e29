# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/redis_backend.py

CacheBackend sobre Redis (redis.asyncio).

- set_if_absent: SET key value NX EX ttl
- compare_and_delete: script Lua (GET + DEL en el servidor, atómico)
- get_and_delete: MULTI/EXEC con GET + DEL
- incr_window: pipeline INCR + TTL; EXPIRE sólo si la clave no tiene TTL

Los errores de conexión o de comando se re-lanzan como StorageError.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from redis.exceptions import RedisError

from app.shared.errors import StorageError

from .cache_backend import CacheBackend

logger = logging.getLogger(__name__)

# Borra la clave sólo si el valor coincide con el token del llamador
COMPARE_AND_DELETE_LUA = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class RedisCacheBackend(CacheBackend):
    """Implementación de CacheBackend con un cliente redis.asyncio ya construido."""

    name = "redis"

    def __init__(self, client: Any):
        self._client = client
        self._compare_and_delete = client.register_script(COMPARE_AND_DELETE_LUA)

    @property
    def client(self) -> Any:
        return self._client

    def _fail(self, op: str, key: str, exc: Exception) -> StorageError:
        logger.error("redis_%s_failed: key=%s error=%s", op, key, exc)
        return StorageError(f"Key-value store {op} failed")

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._client.get(key)
        except RedisError as e:
            raise self._fail("get", key, e) from e

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        try:
            await self._client.set(key, value, ex=ttl)
        except RedisError as e:
            raise self._fail("set", key, e) from e

    async def set_if_absent(self, key: str, value: str, ttl: int) -> bool:
        try:
            return bool(await self._client.set(key, value, nx=True, ex=ttl))
        except RedisError as e:
            raise self._fail("set_nx", key, e) from e

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        try:
            result = await self._compare_and_delete(keys=[key], args=[expected])
        except RedisError as e:
            raise self._fail("compare_and_delete", key, e) from e
        return int(result) == 1

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return int(await self._client.delete(*keys))
        except RedisError as e:
            raise self._fail("delete", ",".join(keys), e) from e

    async def get_and_delete(self, key: str) -> Optional[str]:
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.get(key)
                pipe.delete(key)
                value, _ = await pipe.execute()
        except RedisError as e:
            raise self._fail("get_and_delete", key, e) from e
        return value

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._client.exists(key))
        except RedisError as e:
            raise self._fail("exists", key, e) from e

    async def incr_window(self, key: str, window_sec: int) -> Tuple[int, int]:
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.ttl(key)
                count, ttl = await pipe.execute()
            # -1 = sin expiración (primer INCR de la ventana)
            if int(ttl) < 0:
                await self._client.expire(key, window_sec)
                ttl = window_sec
        except RedisError as e:
            raise self._fail("incr", key, e) from e
        return int(count), int(ttl)

    async def hset(self, key: str, mapping: Mapping[str, str], ttl: Optional[int] = None) -> None:
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.hset(key, mapping=dict(mapping))
                if ttl:
                    pipe.expire(key, ttl)
                await pipe.execute()
        except RedisError as e:
            raise self._fail("hset", key, e) from e

    async def hgetall(self, key: str) -> Dict[str, str]:
        try:
            return dict(await self._client.hgetall(key))
        except RedisError as e:
            raise self._fail("hgetall", key, e) from e

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.warning("redis_ping_failed: %s", e)
            return False

    async def close(self) -> None:
        await self._client.aclose()


__all__ = ["RedisCacheBackend", "COMPARE_AND_DELETE_LUA"]
