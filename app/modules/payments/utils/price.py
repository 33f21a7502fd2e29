# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/utils/price.py

Conversión de precios decimales a unidades menores (centavos).

Autor: Vidmarket
Fecha: 2026-10-19
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

MAX_PRICE = Decimal("1000000")
CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Normaliza a Decimal con 2 decimales. ValueError si no es numérico."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"invalid amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Any) -> int:
    """
    Examples:
        >>> to_cents("9.99")
        999
        >>> to_cents(Decimal("10"))
        1000
    """
    return int(to_decimal(value) * 100)


def is_valid_price(value: Any) -> bool:
    """Precio vendible: 0 < precio <= 1,000,000."""
    try:
        amount = to_decimal(value)
    except ValueError:
        return False
    return Decimal("0") < amount <= MAX_PRICE


__all__ = ["to_decimal", "to_cents", "is_valid_price", "MAX_PRICE"]
