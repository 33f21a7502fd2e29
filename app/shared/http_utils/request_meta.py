# -*- coding: utf-8 -*-
"""
backend/app/shared/http_utils/request_meta.py

Extracción segura de la IP del cliente detrás de proxies, usada como
identificador de rate limiting en endpoints sin autenticación (webhook).

Autor: Vidmarket
Fecha: 2026-10-19
"""
from __future__ import annotations

import os

from starlette.requests import Request


def _trust_proxy_headers() -> bool:
    """
    Default: false (seguro para producción).
    Detrás de un balanceador confiable, configurar TRUST_PROXY_HEADERS=true.
    """
    return os.getenv("TRUST_PROXY_HEADERS", "false").lower() in ("true", "1", "yes")


def get_client_ip(request: Request) -> str:
    """
    IP real del cliente.

    Con TRUST_PROXY_HEADERS=true: X-Forwarded-For (primer IP), luego
    X-Real-IP. En cualquier caso termina en request.client.host o "unknown".
    """
    if _trust_proxy_headers():
        xff = request.headers.get("x-forwarded-for")
        if xff:
            return xff.split(",")[0].strip()
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


__all__ = ["get_client_ip"]
