# -*- coding: utf-8 -*-
"""
backend/app/shared/config/__init__.py

Punto único de acceso a la configuración:
    from app.shared.config import get_settings
"""

from .config_loader import get_settings, load_settings
from .settings_base import BaseAppSettings

__all__ = ["get_settings", "load_settings", "BaseAppSettings"]
# Fin del archivo
