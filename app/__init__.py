# -*- coding: utf-8 -*-
"""
backend/app/__init__.py

Inicializador del paquete principal 'app' del backend Vidmarket.

Funciones:
- Asegura compatibilidad del event loop de asyncio en Windows
  (necesario para asyncpg y SQLAlchemy Async).

Autor: Vidmarket
Fecha: 2026-10-19
"""
import sys
import asyncio

# Fuerza un event loop compatible en Windows
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Fin del archivo backend/app/__init__.py
