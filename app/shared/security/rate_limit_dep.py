# -*- coding: utf-8 -*-
"""
backend/app/shared/security/rate_limit_dep.py

FastAPI dependencies for rate limiting.
The RateLimitService instance is the one built at startup
(request.app.state.services.rate_limiter).

Author: Vidmarket
Updated: 2026-10-19
"""
# Note: NOT using 'from __future__ import annotations' to ensure FastAPI
# can properly resolve Request type annotation for dependency injection

import logging
from typing import Optional

from fastapi import Request, HTTPException, status

from app.shared.security.rate_limit_service import RateLimitService, RateLimitResult
from app.shared.http_utils.request_meta import get_client_ip

logger = logging.getLogger(__name__)


class RateLimitExceeded(HTTPException):
    """Exception raised when rate limit is exceeded."""

    def __init__(self, retry_after: int, detail: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "code": "RATE_LIMITED",
                "message": detail or "Too many requests. Try again later.",
                "retry_after": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after


class RateLimitDep:
    """
    Per-IP rate limit dependency.

    Usage:
        @router.post("/webhook")
        async def webhook(
            request: Request,
            _: RateLimitResult = Depends(RateLimitDep(
                "payments:webhook", window_sec=60, limit_setting="webhook_rate_limit_per_minute"
            )),
        ):
            ...
    """

    def __init__(
        self,
        endpoint: str,
        *,
        window_sec: int,
        limit: Optional[int] = None,
        limit_setting: Optional[str] = None,
    ):
        if limit is None and limit_setting is None:
            raise ValueError("RateLimitDep needs limit or limit_setting")
        self.endpoint = endpoint
        self.limit = limit
        self.limit_setting = limit_setting
        self.window_sec = window_sec

    def _resolve_limit(self, request: Request) -> int:
        if self.limit is not None:
            return self.limit
        # Límite leído de los settings con los que arrancó la app
        return int(getattr(request.app.state.services.settings, self.limit_setting))

    async def __call__(self, request: Request) -> RateLimitResult:
        limiter: RateLimitService = request.app.state.services.rate_limiter
        identifier = get_client_ip(request)

        result = await limiter.check_and_consume(
            self.endpoint,
            "ip",
            identifier,
            limit=self._resolve_limit(request),
            window_sec=self.window_sec,
        )
        if not result.allowed:
            raise RateLimitExceeded(retry_after=result.retry_after)
        return result


__all__ = ["RateLimitDep", "RateLimitExceeded"]
