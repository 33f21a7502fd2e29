# -*- coding: utf-8 -*-
"""
backend/app/shared/security/rate_limit_service.py

Rate limiting service on top of the shared key-value store.
Fixed-window counters: INCR + EXPIRE on the first hit of the window.

Key naming convention:
- rl:video:user:{user_id}        (streaming token issuance)
- rl:payments:webhook:ip:{ip}    (webhook endpoint)

Author: Vidmarket
Updated: 2026-10-19
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from app.shared.cache import CacheBackend

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""
    allowed: bool
    remaining: int
    retry_after: int  # seconds until limit resets
    current_count: int
    limit: int


class RateLimitService:
    """
    Rate limiting service sharing the store used by locks and caches.

    Unlike locks, a store failure here propagates (StorageError) instead of
    failing open: callers decide whether the endpoint tolerates it.
    """

    def __init__(self, store: CacheBackend, *, enabled: bool = True):
        self._store = store
        self._enabled = enabled

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @staticmethod
    def _build_key(endpoint: str, key_type: str, identifier: str) -> str:
        """Build standardized rate limit key."""
        normalized = identifier.lower().strip() if identifier else "unknown"
        return f"rl:{endpoint}:{key_type}:{normalized}"

    async def check_and_consume(
        self,
        endpoint: str,
        key_type: str,
        identifier: str,
        *,
        limit: int,
        window_sec: int,
    ) -> RateLimitResult:
        """
        Check rate limit and consume one request.

        Args:
            endpoint: Endpoint identifier (e.g., "video")
            key_type: Key type ("user" or "ip")
            identifier: The actual identifier (user id or IP address)
            limit: Max requests in window
            window_sec: Window duration in seconds

        Returns:
            RateLimitResult with allowed status and metadata
        """
        if not self._enabled:
            return RateLimitResult(
                allowed=True,
                remaining=limit,
                retry_after=0,
                current_count=0,
                limit=limit,
            )

        key = self._build_key(endpoint, key_type, identifier)
        current_count, ttl = await self._store.incr_window(key, window_sec)

        allowed = current_count <= limit
        result = RateLimitResult(
            allowed=allowed,
            remaining=max(0, limit - current_count),
            retry_after=0 if allowed else max(1, ttl),
            current_count=current_count,
            limit=limit,
        )
        if not allowed:
            logger.warning(
                "rate_limit_exceeded: key=%s count=%d limit=%d",
                key, current_count, limit,
            )
        return result

    async def reset_key(self, endpoint: str, key_type: str, identifier: str) -> None:
        """Reset the counter for a specific key."""
        await self._store.delete(self._build_key(endpoint, key_type, identifier))


__all__ = ["RateLimitService", "RateLimitResult"]
