# -*- coding: utf-8 -*-
"""
backend/app/shared/middleware/__init__.py

Módulo de middlewares compartidos.
"""

from .exception_handler import JSONExceptionMiddleware, app_error_handler, get_request_id
from .request_logging import RequestLoggingMiddleware

__all__ = [
    "JSONExceptionMiddleware",
    "app_error_handler",
    "get_request_id",
    "RequestLoggingMiddleware",
]
