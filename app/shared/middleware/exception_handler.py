# -*- coding: utf-8 -*-
"""
backend/app/shared/middleware/exception_handler.py

Manejo de errores HTTP en formato JSON.

- JSONExceptionMiddleware: captura excepciones no manejadas y responde 500
  JSON con request_id para trazabilidad.
- app_error_handler: exception handler de FastAPI que traduce AppError
  (ValidationError, PaymentError, StorageError, VideoAccessError) a su
  status HTTP y código estable.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.shared.errors import AppError

logger = logging.getLogger(__name__)

REQUEST_ID_HEADERS = ["x-request-id", "x-correlation-id"]


def get_request_id(request: Request) -> str:
    """Extrae request_id de headers, del state, o genera uno nuevo."""
    existing = getattr(request.state, "request_id", None)
    if existing:
        return existing
    for header in REQUEST_ID_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return uuid.uuid4().hex[:16]


class JSONExceptionMiddleware(BaseHTTPMiddleware):
    """
    Middleware que captura excepciones no manejadas y devuelve JSON.

    Garantiza:
    - Content-Type: application/json (nunca text/plain)
    - code estable para UI
    - request_id para correlación de logs
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = get_request_id(request)
        request.state.request_id = request_id

        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "unhandled_exception request_id=%s method=%s path=%s error=%r",
                request_id,
                request.method,
                request.url.path,
                e,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "status": "error",
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": "Internal server error",
                    "request_id": request_id,
                },
                headers={"X-Request-ID": request_id},
            )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Traduce errores de dominio a JSON {status, code, message, request_id}."""
    request_id = get_request_id(request)
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "app_error request_id=%s path=%s code=%s status=%d message=%s",
        request_id,
        request.url.path,
        exc.code,
        exc.status_code,
        exc.message,
    )
    content = exc.to_dict()
    content["request_id"] = request_id

    headers = {"X-Request-ID": request_id}
    retry_after = exc.details.get("retry_after")
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)

    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


__all__ = ["JSONExceptionMiddleware", "app_error_handler", "get_request_id"]
# Fin del archivo backend/app/shared/middleware/exception_handler.py
