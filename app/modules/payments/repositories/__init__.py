# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/repositories/__init__.py

Repositorios del módulo Payments.
"""

from .purchase_repository import PurchaseRepository, InvalidTransitionError

__all__ = ["PurchaseRepository", "InvalidTransitionError"]
