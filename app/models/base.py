"""
Base models shared by the compression API responses.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class APIModel(BaseModel):
    """Base class for models serialized with camelCase field names"""
    model_config = ConfigDict(populate_by_name=True)


class BaseQualityMetrics(APIModel):
    """Image fidelity of the re-encoded image against the original"""
    psnr: Optional[float] = Field(
        None, description="Peak Signal-to-Noise Ratio between original and compressed images"
    )
    ssim: Optional[float] = Field(
        None, description="Structural Similarity Index between original and compressed images"
    )


class ErrorResponse(APIModel):
    """Error payload returned for failed requests"""
    error: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Error class, e.g. InvalidImageFormat")
