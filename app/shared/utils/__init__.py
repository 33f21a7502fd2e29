# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/__init__.py

Exportación de utilidades comunes.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from .jwt_utils import create_token, decode_token, verify_token_type

__all__ = [
    "create_token",
    "decode_token",
    "verify_token_type",
]
