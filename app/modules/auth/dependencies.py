# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/dependencies.py

Dependencias de autenticación JWT para FastAPI.

Provee:
- validate_jwt_token: Core logic para validar token (única fuente de verdad)
- get_current_user_id: Dependencia FastAPI con oauth2_scheme

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from app.shared.config.settings_base import BaseAppSettings

from .security import oauth2_scheme, decode_access_token, TokenDecodeError

logger = logging.getLogger(__name__)


def validate_jwt_token(token: str, settings: Optional[BaseAppSettings] = None) -> str:
    """
    Valida un JWT y extrae el user_id (claim 'sub').

    Raises:
        HTTPException 401: Si el token es inválido o expirado.
    """
    try:
        payload = decode_access_token(token, settings)
    except TokenDecodeError as e:
        logger.info("auth_rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "code": "INVALID_TOKEN",
                "message": str(e),
            },
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    return str(payload["sub"])


async def get_current_user_id(
    request: Request,
    token: str = Depends(oauth2_scheme),
) -> str:
    """
    Dependencia de autenticación para endpoints protegidos.

    Extrae y valida el JWT del header Authorization: Bearer <token>.
    """
    # Misma configuración con la que arrancó la app
    return validate_jwt_token(token, request.app.state.services.settings)


__all__ = ["get_current_user_id", "validate_jwt_token"]
