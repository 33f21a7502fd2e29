# -*- coding: utf-8 -*-
"""
backend/app/core/__init__.py

Fachada de componentes centrales de Vidmarket: el contenedor de servicios
construido en el lifespan y sus providers para FastAPI.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from .container import (
    ServiceContainer,
    assemble_container,
    build_container,
    get_container,
    get_entitlement_service,
    get_fulfillment_service,
    get_purchase_intent_service,
    get_token_issuer,
)

__all__ = [
    "ServiceContainer",
    "assemble_container",
    "build_container",
    "get_container",
    "get_purchase_intent_service",
    "get_fulfillment_service",
    "get_entitlement_service",
    "get_token_issuer",
]

# Fin del archivo backend/app/core/__init__.py
