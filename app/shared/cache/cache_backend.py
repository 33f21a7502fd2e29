# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/cache_backend.py

Interfaz base (ABC) del store clave-valor compartido.

Define el contrato que usan LockManager, EntitlementCache, RateLimitService
y AccessTokenIssuer. Implementaciones:
- RedisCacheBackend: Redis (redis.asyncio), compartido entre procesos.
- MemoryCacheBackend: en proceso, para desarrollo local y pruebas.

Todas las operaciones son async y atómicas respecto a la clave que tocan.
Los valores son str; la serialización JSON es responsabilidad del caller.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional, Tuple


class CacheBackend(ABC):
    """
    Contrato del store clave-valor con expiración.

    Operaciones requeridas por el core:
    - set_if_absent: SET NX EX (adquisición de locks)
    - compare_and_delete: borrado condicionado al valor (liberación de locks)
    - get_and_delete: lectura y borrado atómicos (tokens de un solo uso)
    - incr_window: contador con ventana (rate limiting)
    - hset/hgetall: lectura/escritura de hashes
    """

    name: str = "abstract"

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Guarda `value`; con `ttl` (segundos) la entrada expira."""
        ...

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl: int) -> bool:
        """True si la clave no existía y quedó escrita con expiración."""
        ...

    @abstractmethod
    async def compare_and_delete(self, key: str, expected: str) -> bool:
        """Borra la clave sólo si su valor actual es `expected`. Atómico."""
        ...

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Número de claves borradas."""
        ...

    @abstractmethod
    async def get_and_delete(self, key: str) -> Optional[str]:
        """Lee y borra en una sola operación atómica."""
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    async def incr_window(self, key: str, window_sec: int) -> Tuple[int, int]:
        """
        Incrementa el contador de `key`; la expiración se fija en el primer
        incremento de la ventana.

        Returns:
            (conteo_actual, ttl_restante_en_segundos)
        """
        ...

    @abstractmethod
    async def hset(self, key: str, mapping: Mapping[str, str], ttl: Optional[int] = None) -> None:
        ...

    @abstractmethod
    async def hgetall(self, key: str) -> Dict[str, str]:
        ...

    @abstractmethod
    async def ping(self) -> bool:
        ...

    async def close(self) -> None:
        """Libera conexiones; no-op por defecto."""
        return None


__all__ = ["CacheBackend"]
