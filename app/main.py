# -*- coding: utf-8 -*-
"""
backend/app/main.py

Punto de entrada principal del backend Vidmarket.

Ajustes clave:
- create_app(settings, container): fábrica usada por uvicorn y por las pruebas.
- Lifespan: construye el ServiceContainer una sola vez (engine, store,
  pasarela, servicios) y lo libera en el shutdown. Si el store configurado
  no responde, el arranque falla.
- Errores de dominio (AppError) -> JSON {status, code, message, request_id}.
- CORS registrado al final para ejecutarse primero (outermost).

Autor: Vidmarket
Fecha: 2026-10-19
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

# ---------------------------------------------------------------------------
# Cargar .env ANTES de leer la configuración
# En DEV: override=True para que .env mande sobre variables del entorno
# En PROD: override=False para respetar variables del entorno
# ---------------------------------------------------------------------------
from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_PYTHON_ENV = os.getenv("PYTHON_ENV", "development").strip().strip('"').strip("'").lower()
load_dotenv(dotenv_path=_ENV_PATH, override=_PYTHON_ENV == "development")

import anyio
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.container import ServiceContainer, build_container
from app.routes import router as api_router
from app.shared.config import get_settings
from app.shared.config.logging_config import setup_logging
from app.shared.config.settings_base import BaseAppSettings
from app.shared.errors import AppError
from app.shared.middleware import (
    JSONExceptionMiddleware,
    RequestLoggingMiddleware,
    app_error_handler,
)

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "payments", "description": "Compra de videos y consultas del ledger"},
    {"name": "payments:webhooks", "description": "Webhooks de la pasarela de pago"},
    {"name": "videos", "description": "Entitlement y tokens de acceso a video"},
]


def _configure_cors(app_instance: FastAPI, settings: BaseAppSettings) -> dict:
    """
    Configura CORS middleware.

    Returns:
        dict con la configuración aplicada para logging.
    """
    origins_list = settings.get_cors_origins()
    is_wildcard_only = origins_list == ["*"]

    if is_wildcard_only and settings.is_prod:
        logger.warning("CORS wildcard in production: set CORS_ORIGINS to explicit origins")

    cors_config = {
        "allow_origins": origins_list,
        # "*" con allow_credentials=True es inválido en navegadores
        "allow_credentials": not is_wildcard_only,
        "allow_methods": ["GET", "POST", "DELETE", "OPTIONS"],
        "allow_headers": ["*"],
        "expose_headers": ["X-Request-ID", "Retry-After"],
        "max_age": 600,
    }
    app_instance.add_middleware(CORSMiddleware, **cors_config)
    logger.info("CORS enabled origins=%s credentials=%s", origins_list, cors_config["allow_credentials"])
    return cors_config


def create_app(
    settings: Optional[BaseAppSettings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Construye la aplicación.

    Args:
        settings: configuración; por defecto la de PYTHON_ENV.
        container: servicios ya construidos (pruebas). Si se pasa, el
            lifespan no lo crea ni lo cierra.
    """
    if settings is None:
        settings = container.settings if container is not None else get_settings()

    setup_logging(settings.log_level, settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ────────── STARTUP ──────────
        owns_container = container is None
        services = container if container is not None else await build_container(settings)
        app.state.services = services
        logger.info("🟢 Backend de %s iniciado (env=%s).", settings.app_name, settings.python_env)
        try:
            yield
        finally:
            # ────────── SHUTDOWN ──────────
            with anyio.CancelScope(shield=True):
                if owns_container:
                    await services.aclose()
            logger.info("🔴 Backend de %s apagado.", settings.app_name)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Compra de videos, fulfillment por webhook y acceso a contenido",
        version=settings.app_version,
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.include_router(api_router)

    # El orden real de ejecución es inverso al registro
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(JSONExceptionMiddleware)
    _configure_cors(app, settings)

    return app


app = create_app()


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=_settings.app_host,
        port=_settings.app_port,
        reload=_settings.is_dev,
    )

# Fin del archivo backend/app/main.py
