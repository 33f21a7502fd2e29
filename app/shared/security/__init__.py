# -*- coding: utf-8 -*-
"""
backend/app/shared/security/__init__.py

Security utilities for Vidmarket.
"""

from .rate_limit_service import RateLimitService, RateLimitResult
from .rate_limit_dep import RateLimitDep, RateLimitExceeded

__all__ = [
    "RateLimitService",
    "RateLimitResult",
    "RateLimitDep",
    "RateLimitExceeded",
]
