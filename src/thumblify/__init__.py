"""Thumblify - AI-generated video thumbnails."""

__version__ = "0.1.0"

from thumblify.core.config import ThumblifyConfig, config

__all__ = [
    "ThumblifyConfig",
    "config",
]
