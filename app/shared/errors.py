# -*- coding: utf-8 -*-
"""
backend/app/shared/errors.py

Taxonomía de errores de dominio de Vidmarket.

Todos heredan de AppError y llevan:
- code: código estable legible por máquina (p.ej. "ALREADY_PURCHASED")
- status_code: código HTTP con el que se expone en la API
- message: texto para el usuario

Los servicios lanzan estas excepciones; el handler registrado en main.py
las convierte en respuestas JSON homogéneas.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AppError(Exception):
    """Base de errores de dominio con código estable y status HTTP."""

    default_code: str = "APP_ERROR"
    default_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "status": "error",
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload

    def __repr__(self) -> str:
        return f"<{type(self).__name__} code={self.code} status={self.status_code} message={self.message!r}>"


class ValidationError(AppError):
    """Entrada inválida o recurso inexistente. Nunca se reintenta."""

    default_code = "VALIDATION_ERROR"
    default_status = 400


class PaymentError(AppError):
    """Violación de regla de negocio en el flujo de compra."""

    default_code = "PAYMENT_ERROR"
    default_status = 402


class StorageError(AppError):
    """Falla de persistencia (base de datos o store clave-valor)."""

    default_code = "STORAGE_ERROR"
    default_status = 500


class VideoAccessError(AppError):
    """Falla de entitlement o de token de acceso."""

    default_code = "VIDEO_ACCESS_DENIED"
    default_status = 403


# Constructores de los casos más frecuentes (mensajes y códigos estables)
def purchase_in_progress() -> PaymentError:
    return PaymentError(
        "Purchase already in progress",
        code="PURCHASE_IN_PROGRESS",
        status_code=409,
    )


def already_purchased() -> PaymentError:
    return PaymentError(
        "Video already purchased",
        code="ALREADY_PURCHASED",
        status_code=409,
    )


def not_found(what: str) -> ValidationError:
    return ValidationError(
        f"{what} not found",
        code=f"{what.upper().replace(' ', '_')}_NOT_FOUND",
        status_code=404,
    )


__all__ = [
    "AppError",
    "ValidationError",
    "PaymentError",
    "StorageError",
    "VideoAccessError",
    "purchase_in_progress",
    "already_purchased",
    "not_found",
]
# Fin del archivo backend/app/shared/errors.py
