# -*- coding: utf-8 -*-
"""
backend/app/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.
"""

from __future__ import annotations

from .base import Base, NAMING_CONVENTION, as_db_enum
from .database import (
    create_engine_from_settings,
    create_session_factory,
    session_scope,
    check_database_health,
)
from .repository import BaseRepository

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "as_db_enum",
    "BaseRepository",
    "create_engine_from_settings",
    "create_session_factory",
    "session_scope",
    "check_database_health",
]

# Fin del archivo backend/app/shared/database/__init__.py
