# -*- coding: utf-8 -*-
"""
backend/app/shared/database/database.py

SQLAlchemy async (asyncpg en producción, aiosqlite en pruebas).

Provee:
- create_engine_from_settings(settings)
- create_session_factory(engine) -> async_sessionmaker
- session_scope(factory): context manager transaccional
- check_database_health(engine)

El engine y la fábrica de sesiones se construyen una sola vez en el
lifespan de la app y se inyectan en los servicios; no hay engine global
creado al importar.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.shared.config.settings_base import BaseAppSettings
from app.shared.errors import StorageError

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings: BaseAppSettings) -> AsyncEngine:
    """Crea el AsyncEngine según la URL configurada."""
    url = settings.database_url
    kwargs: dict = {"echo": settings.db_echo_sql, "future": True}

    if url.startswith("sqlite"):
        # aiosqlite: el pool por defecto basta; timeout para escritores concurrentes
        kwargs["connect_args"] = {"timeout": 30}
    else:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
        )

    engine = create_async_engine(url, **kwargs)
    logger.info(
        "[DB] engine created dialect=%s echo=%s",
        engine.dialect.name,
        settings.db_echo_sql,
    )
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
        class_=AsyncSession,
    )


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Abre una sesión con transacción: commit al salir, rollback ante error.

    Los errores de SQLAlchemy se re-lanzan como StorageError.
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("db_transaction_failed: %s", e)
            raise StorageError("Database operation failed") from e
        except BaseException:
            await session.rollback()
            raise


async def check_database_health(engine: AsyncEngine) -> bool:
    """Ejecuta SELECT 1; False si la base no responde."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.warning("[DB] health check failed: %s", e)
        return False


__all__ = [
    "create_engine_from_settings",
    "create_session_factory",
    "session_scope",
    "check_database_health",
]

# Fin del archivo backend/app/shared/database/database.py
