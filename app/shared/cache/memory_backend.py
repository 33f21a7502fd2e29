# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/memory_backend.py

Store clave-valor en memoria del proceso (desarrollo local y pruebas).

- Expiración perezosa: las entradas vencidas se descartan al leerlas.
- Ningún método hace await entre leer y escribir, así que cada operación
  es atómica dentro del event loop (no sirve entre procesos).

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

from .cache_backend import CacheBackend


@dataclass
class _Entry:
    value: Union[str, Dict[str, str]]
    expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryCacheBackend(CacheBackend):
    """Implementación en proceso de CacheBackend."""

    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, _Entry] = {}

    # ------------------------------------------------------------------
    # Helpers internos
    # ------------------------------------------------------------------
    def _live(self, key: str) -> Optional[_Entry]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._data[key]
            return None
        return entry

    def _expiry(self, ttl: Optional[int]) -> Optional[float]:
        return self._clock() + ttl if ttl else None

    def _str_value(self, key: str) -> Optional[str]:
        entry = self._live(key)
        if entry is None or not isinstance(entry.value, str):
            return None
        return entry.value

    # ------------------------------------------------------------------
    # CacheBackend
    # ------------------------------------------------------------------
    async def get(self, key: str) -> Optional[str]:
        return self._str_value(key)

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        self._data[key] = _Entry(value=value, expires_at=self._expiry(ttl))

    async def set_if_absent(self, key: str, value: str, ttl: int) -> bool:
        if self._live(key) is not None:
            return False
        self._data[key] = _Entry(value=value, expires_at=self._expiry(ttl))
        return True

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        if self._str_value(key) != expected:
            return False
        del self._data[key]
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                del self._data[key]
                removed += 1
        return removed

    async def get_and_delete(self, key: str) -> Optional[str]:
        value = self._str_value(key)
        if value is not None:
            del self._data[key]
        return value

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def incr_window(self, key: str, window_sec: int) -> Tuple[int, int]:
        now = self._clock()
        entry = self._live(key)
        if entry is None:
            self._data[key] = _Entry(value="1", expires_at=now + window_sec)
            return 1, window_sec
        count = int(entry.value) + 1  # type: ignore[arg-type]
        entry.value = str(count)
        if entry.expires_at is None:
            entry.expires_at = now + window_sec
        return count, max(0, int(entry.expires_at - now))

    async def hset(self, key: str, mapping: Mapping[str, str], ttl: Optional[int] = None) -> None:
        entry = self._live(key)
        current = dict(entry.value) if entry is not None and isinstance(entry.value, dict) else {}
        current.update(mapping)
        expires_at = self._expiry(ttl) if ttl else (entry.expires_at if entry else None)
        self._data[key] = _Entry(value=current, expires_at=expires_at)

    async def hgetall(self, key: str) -> Dict[str, str]:
        entry = self._live(key)
        if entry is None or not isinstance(entry.value, dict):
            return {}
        return dict(entry.value)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


__all__ = ["MemoryCacheBackend"]
