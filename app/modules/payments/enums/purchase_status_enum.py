# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums/purchase_status_enum.py

Enum de estados de una compra.

Transiciones válidas: pending -> completed, pending -> failed.
completed y failed son terminales.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from enum import StrEnum

from sqlalchemy import Enum as SAEnum

from app.shared.database.base import as_db_enum


class PurchaseStatus(StrEnum):
    """Estado de la compra en su ciclo de vida."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    __pg_enum_name__ = "purchase_status_enum"

    @property
    def is_terminal(self) -> bool:
        return self is not PurchaseStatus.PENDING

    def can_transition_to(self, target: "PurchaseStatus") -> bool:
        return self is PurchaseStatus.PENDING and target.is_terminal

    @classmethod
    def as_db_enum(cls) -> SAEnum:
        return as_db_enum(cls)


__all__ = ["PurchaseStatus"]

# Fin del archivo backend/app/modules/payments/enums/purchase_status_enum.py
