# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/services/__init__.py

Servicios del módulo Videos: entitlement y tokens de acceso.
"""

from .entitlement_cache import EntitlementCache
from .entitlement_service import AccessDecision, EntitlementService
from .access_token_issuer import AccessTokenIssuer, IssuedToken

__all__ = [
    "EntitlementCache",
    "EntitlementService",
    "AccessDecision",
    "AccessTokenIssuer",
    "IssuedToken",
]
