# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/repositories/__init__.py
"""

from .video_repository import VideoRepository

__all__ = ["VideoRepository"]
