# -*- coding: utf-8 -*-
"""
backend/app/shared/__init__.py

Infraestructura compartida de Vidmarket: configuración, base de datos,
store de caché y locks, rate limiting, errores y middlewares.
"""
