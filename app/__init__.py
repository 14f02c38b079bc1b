"""
Image Compression API Application

This package implements a FastAPI application that re-encodes uploaded
images at one of three compression levels:
- JPEG, PNG and WebP images are re-encoded in their own format
- Any other image format is converted to WebP

The compressed image is returned as a data URL ready for preview and
download, together with size statistics.
"""
# Export the app instance
from app.api import app

__all__ = ['app']
