# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/models/__init__.py
"""

from .video_models import Video

__all__ = ["Video"]
