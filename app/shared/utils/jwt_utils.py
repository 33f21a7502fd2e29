# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/jwt_utils.py

JWT helpers (python-jose) para Vidmarket:
- create_token(data, secret, expires_delta, token_type, algorithm)
- decode_token(token, secret, algorithm)
- verify_token_type(token, expected_type, secret, algorithm)

El secreto se pasa explícitamente: cada consumidor (auth, tokens de
streaming) lo recibe de su configuración.

Autor: Vidmarket
Actualizado: 2026-10-19
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt, ExpiredSignatureError
import logging
import uuid

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "HS256"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_token(
    data: dict,
    secret: str,
    expires_delta: timedelta,
    token_type: str = "access",
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    Crea un JWT firmado con tipo, jti y expiración.
    """
    to_encode = data.copy()

    iat = _now_utc()
    to_encode.update({
        "exp": iat + expires_delta,
        "iat": iat,
        "jti": str(uuid.uuid4()),
        "token_type": token_type,
    })

    return jwt.encode(to_encode, secret, algorithm=algorithm)


def decode_token(
    token: str,
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> Optional[Dict[str, Any]]:
    """
    Decodifica y valida un JWT. Devuelve None si es inválido o expiró.
    """
    try:
        return jwt.decode(token, secret, algorithms=[algorithm])
    except ExpiredSignatureError as e:
        logger.info("Token expirado: %s", e)
        return None
    except JWTError as e:
        logger.warning("Token inválido: %s", e)
        return None


def verify_token_type(
    token: str,
    expected_type: str,
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> Optional[Dict[str, Any]]:
    """
    Devuelve el payload si el token es válido y del tipo esperado; de lo contrario, None.
    """
    payload = decode_token(token, secret, algorithm)
    if not payload:
        return None
    if payload.get("token_type") != expected_type:
        logger.warning("Tipo de token no coincide: esperado=%s, recibido=%s", expected_type, payload.get("token_type"))
        return None
    return payload


__all__ = ["create_token", "decode_token", "verify_token_type", "DEFAULT_ALGORITHM"]
# Fin del módulo jwt_utils.py
