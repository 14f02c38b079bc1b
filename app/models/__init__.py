"""
Data models for the image compression API.

This module provides Pydantic models for response validation and
documentation.
"""
from app.models.base import (
    APIModel,
    BaseQualityMetrics,
    ErrorResponse
)

from app.models.compression import CompressionResponse

__all__ = [
    # Base models
    'APIModel',
    'BaseQualityMetrics',
    'ErrorResponse',

    # Compression models
    'CompressionResponse'
]
