# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/schemas/video_access_schemas.py

Contratos de la API de acceso a video.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from app.modules.payments.schemas.common_schemas import CamelModel


class AccessResponse(CamelModel):
    has_access: bool
    is_owner: bool


class PreviewResponse(CamelModel):
    video_id: str
    preview_url: Optional[str] = None


class StreamTokenResponse(CamelModel):
    token: str
    expires_in: int = Field(description="Segundos hasta la expiración.")


class StreamTokenInfo(CamelModel):
    video_id: str
    user_id: str


class DownloadTokenResponse(CamelModel):
    download_id: str
    expires_in: int = Field(description="Segundos hasta la expiración.")


class DownloadRedeemResponse(CamelModel):
    video_id: str
    url: Optional[str] = None


__all__ = [
    "AccessResponse",
    "PreviewResponse",
    "StreamTokenResponse",
    "StreamTokenInfo",
    "DownloadTokenResponse",
    "DownloadRedeemResponse",
]
