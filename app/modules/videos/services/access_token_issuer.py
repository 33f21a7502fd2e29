# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/services/access_token_issuer.py

Tokens de acceso a contenido ya autorizado.

Streaming:
- JWT (token_type="stream") con claims video_id y sub=user_id, TTL 4h.
- Copia en el store: streamtoken:{token} -> {video_id, user_id}, mismo TTL.
  Borrar la copia revoca el token aunque la firma siga vigente.
- Límite por usuario: rl:video:user:{user_id}, 100 por hora.

Descarga:
- ID aleatorio (secrets.token_hex(32)) en download:{id}, TTL 1h.
- Un solo uso: el canje hace GETDEL, así dos canjes simultáneos no
  pueden obtener ambos la URL.

El caller verifica el entitlement antes de pedir un token.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

import json
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Optional

from app.shared.cache import CacheBackend
from app.shared.errors import VideoAccessError
from app.shared.security.rate_limit_service import RateLimitService
from app.shared.utils.jwt_utils import DEFAULT_ALGORITHM, create_token, verify_token_type
from app.modules.payments.utils.datetime_helpers import to_iso8601, utcnow

logger = logging.getLogger(__name__)

STREAM_TOKEN_TYPE = "stream"
STREAM_TOKEN_KEY = "streamtoken:{}"
DOWNLOAD_KEY = "download:{}"
STREAM_RATE_SCOPE = "video"


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_in: int


class AccessTokenIssuer:
    def __init__(
        self,
        *,
        store: CacheBackend,
        rate_limiter: RateLimitService,
        jwt_secret: str,
        jwt_algorithm: str = DEFAULT_ALGORITHM,
        stream_ttl_seconds: int = 14400,
        download_ttl_seconds: int = 3600,
        stream_rate_limit: int = 100,
        stream_rate_window_seconds: int = 3600,
    ) -> None:
        self._store = store
        self._rate_limiter = rate_limiter
        self._secret = jwt_secret
        self._algorithm = jwt_algorithm
        self._stream_ttl = stream_ttl_seconds
        self._download_ttl = download_ttl_seconds
        self._stream_rate_limit = stream_rate_limit
        self._stream_rate_window = stream_rate_window_seconds

    # ------------------------------------------------------------------ #
    # Streaming
    # ------------------------------------------------------------------ #
    async def issue_streaming_token(self, video_id: str, user_id: str) -> IssuedToken:
        """
        Emite un token de streaming para (video, usuario).

        Raises:
            VideoAccessError: 429 RATE_LIMITED con details.retry_after
        """
        rl = await self._rate_limiter.check_and_consume(
            STREAM_RATE_SCOPE,
            "user",
            user_id,
            limit=self._stream_rate_limit,
            window_sec=self._stream_rate_window,
        )
        if not rl.allowed:
            raise VideoAccessError(
                "Too many streaming token requests",
                code="RATE_LIMITED",
                status_code=429,
                details={"retry_after": rl.retry_after},
            )

        token = create_token(
            {"video_id": video_id, "sub": user_id},
            self._secret,
            timedelta(seconds=self._stream_ttl),
            token_type=STREAM_TOKEN_TYPE,
            algorithm=self._algorithm,
        )
        await self._store.set(
            STREAM_TOKEN_KEY.format(token),
            json.dumps({"video_id": video_id, "user_id": user_id}),
            ttl=self._stream_ttl,
        )
        logger.info("stream_token_issued: user_id=%s video_id=%s", user_id, video_id)
        return IssuedToken(token=token, expires_in=self._stream_ttl)

    async def validate_streaming_token(self, token: Optional[str]) -> Optional[Dict[str, str]]:
        """{video_id, user_id} si el token sigue registrado y su firma es válida; si no, None."""
        if not token:
            return None
        if await self._store.get(STREAM_TOKEN_KEY.format(token)) is None:
            return None

        payload = verify_token_type(token, STREAM_TOKEN_TYPE, self._secret, self._algorithm)
        if payload is None:
            return None
        video_id = payload.get("video_id")
        user_id = payload.get("sub")
        if not video_id or not user_id:
            return None
        return {"video_id": video_id, "user_id": user_id}

    async def revoke(self, token: str, *, user_id: Optional[str] = None) -> bool:
        """
        Borra la copia del token. Con user_id, sólo revoca tokens de ese usuario.
        """
        key = STREAM_TOKEN_KEY.format(token)
        if user_id is not None:
            raw = await self._store.get(key)
            if raw is None or json.loads(raw).get("user_id") != user_id:
                return False
        revoked = await self._store.delete(key) > 0
        if revoked:
            logger.info("stream_token_revoked: user_id=%s", user_id)
        return revoked

    # ------------------------------------------------------------------ #
    # Descarga
    # ------------------------------------------------------------------ #
    async def issue_download_token(self, video_id: str, user_id: str) -> IssuedToken:
        download_id = secrets.token_hex(32)
        expires_at = utcnow() + timedelta(seconds=self._download_ttl)
        await self._store.set(
            DOWNLOAD_KEY.format(download_id),
            json.dumps({
                "video_id": video_id,
                "user_id": user_id,
                "expires_at": to_iso8601(expires_at),
            }),
            ttl=self._download_ttl,
        )
        logger.info("download_token_issued: user_id=%s video_id=%s", user_id, video_id)
        return IssuedToken(token=download_id, expires_in=self._download_ttl)

    async def redeem_download_token(self, download_id: str) -> Optional[Dict[str, str]]:
        """Devuelve los datos del token una sola vez; los canjes siguientes dan None."""
        if not download_id:
            return None
        raw = await self._store.get_and_delete(DOWNLOAD_KEY.format(download_id))
        if raw is None:
            return None
        data = json.loads(raw)
        logger.info(
            "download_token_redeemed: user_id=%s video_id=%s",
            data.get("user_id"), data.get("video_id"),
        )
        return data


__all__ = ["AccessTokenIssuer", "IssuedToken", "STREAM_TOKEN_KEY", "DOWNLOAD_KEY"]
