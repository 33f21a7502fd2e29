# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/metrics/routes/routes_prometheus.py

Rutas Prometheus para el módulo de compras:
- /payments/metrics            → Export en formato Prometheus
- /payments/metrics/ping       → Health simple del exporter

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.responses import PlainTextResponse

from ..exporters.prometheus_exporter import prometheus_ping, render_prometheus_metrics

router_prometheus = APIRouter(tags=["payments:metrics"])


@router_prometheus.get("/metrics", response_class=PlainTextResponse)
async def prometheus_metrics() -> PlainTextResponse:
    """Métricas en formato Prometheus para scraping."""
    return PlainTextResponse(render_prometheus_metrics(), media_type=CONTENT_TYPE_LATEST)


@router_prometheus.get("/metrics/ping")
async def ping() -> Dict[str, Any]:
    return prometheus_ping()

# Fin del archivo backend/app/modules/payments/metrics/routes/routes_prometheus.py
