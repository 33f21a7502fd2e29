# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/repositories/video_repository.py

Lectura de videos (identidad, dueño, precio, URLs).

Autor: Vidmarket
Fecha: 2026-10-19
"""

from app.shared.database.repository import BaseRepository
from app.modules.videos.models import Video


class VideoRepository(BaseRepository[Video]):
    def __init__(self) -> None:
        super().__init__(Video)


__all__ = ["VideoRepository"]
