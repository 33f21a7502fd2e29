# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/utils/__init__.py

Helpers de fechas y montos del módulo Payments.
"""
