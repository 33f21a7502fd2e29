# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums/__init__.py

Superficie de exportación de enums del módulo Payments.
"""

from .purchase_status_enum import PurchaseStatus

__all__ = ["PurchaseStatus"]
