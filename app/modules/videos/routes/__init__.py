# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/routes/__init__.py
"""

from .video_access import router

__all__ = ["router"]
