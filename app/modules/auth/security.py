# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/security.py

Seguridad de Auth en Vidmarket:
- Esquema OAuth2 (Bearer) para extraer el token
- Decodificación de JWT de acceso emitidos por el servicio de identidad
- create_access_token para herramientas de desarrollo y pruebas

La emisión de sesiones y el login viven fuera de este servicio; aquí sólo
se verifica la firma con JWT_SECRET_KEY.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Optional, Union

from fastapi.security import OAuth2PasswordBearer

from app.shared.config import get_settings
from app.shared.config.settings_base import BaseAppSettings
from app.shared.utils.jwt_utils import create_token, verify_token_type

ACCESS_TOKEN_TYPE = "access"

# tokenUrl apunta al servicio de identidad externo
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


class TokenDecodeError(Exception):
    """Error al decodificar/validar un token JWT."""


def create_access_token(
    subject: Union[str, int],
    expires_delta: Optional[timedelta] = None,
    *,
    settings: Optional[BaseAppSettings] = None,
    **extra: Any,
) -> str:
    """
    Crea un JWT de acceso con claim 'sub' y metadatos opcionales en `extra`.
    Sin `settings` usa la configuración global.
    """
    settings = settings or get_settings()
    data: Dict[str, Any] = {"sub": str(subject), **extra}
    return create_token(
        data,
        settings.jwt_secret_key.get_secret_value(),
        expires_delta or timedelta(minutes=60),
        token_type=ACCESS_TOKEN_TYPE,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str, settings: Optional[BaseAppSettings] = None) -> Dict[str, Any]:
    """
    Decodifica y valida un JWT de acceso. Lanza TokenDecodeError si es
    inválido, expiró, no es de tipo access o no trae 'sub'.
    """
    settings = settings or get_settings()
    payload = verify_token_type(
        token,
        ACCESS_TOKEN_TYPE,
        settings.jwt_secret_key.get_secret_value(),
        settings.jwt_algorithm,
    )
    if payload is None:
        raise TokenDecodeError("Token inválido o expirado")
    sub = payload.get("sub")
    if sub is None or not str(sub).strip():
        raise TokenDecodeError("Token sin 'sub'")
    return payload
# Fin del archivo
