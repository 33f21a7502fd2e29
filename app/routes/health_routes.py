# -*- coding: utf-8 -*-
"""
backend/app/routes/health_routes.py

Endpoint básico de health check de Vidmarket.

Autor: Vidmarket
Fecha: 2026-10-19
"""

import logging

from fastapi import APIRouter, Depends

from app.core.container import ServiceContainer, get_container
from app.modules.payments.utils.datetime_helpers import to_iso8601, utcnow
from app.shared.database import check_database_health
from app.shared.errors import StorageError

logger = logging.getLogger(__name__)

router = APIRouter()


async def _store_ok(container: ServiceContainer) -> bool:
    try:
        return await container.store.ping()
    except StorageError as e:
        logger.warning("[health] store ping failed: %s", e)
        return False


@router.get(
    "/health",
    summary="Health check del backend",
    description=(
        "Devuelve el estado básico del backend, incluyendo verificación "
        "simple de la base de datos y del store clave-valor."
    ),
)
async def health_check(container: ServiceContainer = Depends(get_container)) -> dict:
    """
    Health check básico del backend.

    Returns:
        dict: información mínima de estado de la aplicación.
    """
    settings = container.settings

    db_ok = await check_database_health(container.engine)
    store_ok = await _store_ok(container)

    return {
        "status": "ok" if db_ok and store_ok else "degraded",
        "timestamp": to_iso8601(utcnow()),
        "environment": settings.python_env,
        "database": {
            "reachable": db_ok,
        },
        "store": {
            "backend": container.store.name,
            "reachable": store_ok,
        },
        "service": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
    }

# Fin del archivo backend/app/routes/health_routes.py
