# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/schemas/__init__.py
"""

from .video_access_schemas import (
    AccessResponse,
    DownloadRedeemResponse,
    DownloadTokenResponse,
    PreviewResponse,
    StreamTokenInfo,
    StreamTokenResponse,
)

__all__ = [
    "AccessResponse",
    "PreviewResponse",
    "StreamTokenResponse",
    "StreamTokenInfo",
    "DownloadTokenResponse",
    "DownloadRedeemResponse",
]
