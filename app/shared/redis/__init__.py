# -*- coding: utf-8 -*-
"""
backend/app/shared/redis/__init__.py

Construcción del cliente Redis / store compartido.
"""

from .client import build_redis_client, connect_cache_backend

__all__ = ["build_redis_client", "connect_cache_backend"]
