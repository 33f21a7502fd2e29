# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/routes/video_access.py

Rutas de acceso a video.

Endpoints:
- GET    /videos/{videoId}/access
- GET    /videos/{videoId}/preview
- POST   /videos/{videoId}/stream-token
- GET    /videos/stream/validate?token=
- DELETE /videos/stream-token?token=
- POST   /videos/{videoId}/download-token
- POST   /videos/downloads/{downloadId}/redeem

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.container import get_entitlement_service, get_token_issuer
from app.modules.auth import get_current_user_id
from app.modules.videos.schemas import (
    AccessResponse,
    DownloadRedeemResponse,
    DownloadTokenResponse,
    PreviewResponse,
    StreamTokenInfo,
    StreamTokenResponse,
)
from app.modules.videos.services import AccessTokenIssuer, EntitlementService
from app.shared.errors import VideoAccessError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/videos",
    tags=["videos"],
)


# Rutas estáticas antes de las parametrizadas
@router.get(
    "/stream/validate",
    response_model=StreamTokenInfo,
    summary="Valida un token de streaming (CDN / player)",
)
async def validate_stream_token(
    token: Optional[str] = Query(default=None),
    issuer: AccessTokenIssuer = Depends(get_token_issuer),
) -> StreamTokenInfo:
    info = await issuer.validate_streaming_token(token)
    if info is None:
        raise VideoAccessError(
            "Invalid or expired stream token",
            code="INVALID_STREAM_TOKEN",
            status_code=401,
        )
    return StreamTokenInfo(video_id=info["video_id"], user_id=info["user_id"])


@router.delete(
    "/stream-token",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoca un token de streaming propio",
)
async def revoke_stream_token(
    token: str = Query(...),
    user_id: str = Depends(get_current_user_id),
    issuer: AccessTokenIssuer = Depends(get_token_issuer),
) -> Response:
    await issuer.revoke(token, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/downloads/{download_id}/redeem",
    response_model=DownloadRedeemResponse,
    summary="Canjea un token de descarga (un solo uso)",
)
async def redeem_download(
    download_id: str,
    issuer: AccessTokenIssuer = Depends(get_token_issuer),
    entitlements: EntitlementService = Depends(get_entitlement_service),
) -> DownloadRedeemResponse:
    data = await issuer.redeem_download_token(download_id)
    if data is None:
        raise VideoAccessError(
            "Download token not found or already used",
            code="DOWNLOAD_NOT_FOUND",
            status_code=404,
        )
    video = await entitlements.get_video(data["video_id"])
    return DownloadRedeemResponse(video_id=video.id, url=video.full_video_url)


@router.get(
    "/{video_id}/access",
    response_model=AccessResponse,
    summary="¿El usuario puede ver el video?",
)
async def check_video_access(
    video_id: str,
    user_id: str = Depends(get_current_user_id),
    entitlements: EntitlementService = Depends(get_entitlement_service),
) -> AccessResponse:
    decision = await entitlements.check_access(user_id, video_id)
    return AccessResponse(has_access=decision.has_access, is_owner=decision.is_owner)


@router.get(
    "/{video_id}/preview",
    response_model=PreviewResponse,
    summary="Preview público del video",
)
async def video_preview(
    video_id: str,
    entitlements: EntitlementService = Depends(get_entitlement_service),
) -> PreviewResponse:
    preview_url = await entitlements.get_preview_url(video_id)
    return PreviewResponse(video_id=video_id, preview_url=preview_url)


@router.post(
    "/{video_id}/stream-token",
    response_model=StreamTokenResponse,
    summary="Emite un token de streaming",
)
async def issue_stream_token(
    video_id: str,
    user_id: str = Depends(get_current_user_id),
    entitlements: EntitlementService = Depends(get_entitlement_service),
    issuer: AccessTokenIssuer = Depends(get_token_issuer),
) -> StreamTokenResponse:
    await entitlements.require_access(user_id, video_id)
    issued = await issuer.issue_streaming_token(video_id, user_id)
    return StreamTokenResponse(token=issued.token, expires_in=issued.expires_in)


@router.post(
    "/{video_id}/download-token",
    response_model=DownloadTokenResponse,
    summary="Emite un token de descarga de un solo uso",
)
async def issue_download_token(
    video_id: str,
    user_id: str = Depends(get_current_user_id),
    entitlements: EntitlementService = Depends(get_entitlement_service),
    issuer: AccessTokenIssuer = Depends(get_token_issuer),
) -> DownloadTokenResponse:
    await entitlements.require_access(user_id, video_id)
    issued = await issuer.issue_download_token(video_id, user_id)
    return DownloadTokenResponse(download_id=issued.token, expires_in=issued.expires_in)


__all__ = ["router"]

# Fin del archivo backend/app/modules/videos/routes/video_access.py
