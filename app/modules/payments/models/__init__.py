# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/models/__init__.py

Punto de entrada de modelos ORM del módulo Payments.
"""

from __future__ import annotations

from .purchase_models import Purchase

__all__ = ["Purchase"]
