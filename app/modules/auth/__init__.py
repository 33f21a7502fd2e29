# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/__init__.py

Verificación de identidad del llamador (JWT Bearer).

Expone:
- get_current_user_id
- validate_jwt_token
"""

from .dependencies import get_current_user_id, validate_jwt_token

__all__ = [
    "get_current_user_id",
    "validate_jwt_token",
]
# Fin del archivo backend/app/modules/auth/__init__.py
