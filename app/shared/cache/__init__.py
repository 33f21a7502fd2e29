# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/__init__.py

Store clave-valor compartido (interfaz, backends) y locks distribuidos.
"""

from .cache_backend import CacheBackend
from .lock_manager import LockManager
from .memory_backend import MemoryCacheBackend
from .redis_backend import RedisCacheBackend

__all__ = ["CacheBackend", "LockManager", "MemoryCacheBackend", "RedisCacheBackend"]
