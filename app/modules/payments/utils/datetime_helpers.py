# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/utils/datetime_helpers.py

Utilidades para manejo consistente de timestamps UTC.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Retorna el timestamp UTC actual (timezone-aware).

    Examples:
        >>> utcnow().tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Asegura que un datetime sea UTC timezone-aware.
    Los naive se interpretan como UTC (SQLite no guarda zona horaria).
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def truncate_subsecond(dt: datetime) -> datetime:
    """
    Descarta la fracción de segundo.

    completed_at se guarda siempre truncado para que dos lecturas del mismo
    registro comparen iguales sin importar el driver.

    Examples:
        >>> truncate_subsecond(datetime(2026, 1, 1, 10, 0, 0, 999999)).microsecond
        0
    """
    return dt.replace(microsecond=0)


def pending_cutoff(window_minutes: int, now: Optional[datetime] = None) -> datetime:
    """Instante a partir del cual una compra pending se considera viva."""
    return (now or utcnow()) - timedelta(minutes=window_minutes)


def to_iso8601(dt: Optional[datetime]) -> Optional[str]:
    """Serializa a ISO 8601 con sufijo Z; None se preserva."""
    if dt is None:
        return None
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")


__all__ = ["utcnow", "ensure_utc", "truncate_subsecond", "pending_cutoff", "to_iso8601"]
