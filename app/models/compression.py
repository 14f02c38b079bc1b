"""
Models for image compression responses.
"""
from pydantic import Field

from app.core.compressor import CompressionResult
from app.models.base import BaseQualityMetrics


class CompressionResponse(BaseQualityMetrics):
    """Response model for a compressed image"""
    compressed_data_url: str = Field(
        ..., alias="compressedDataUrl",
        description="data: URL holding the output MIME type and base64 payload"
    )
    size: int = Field(..., description="Size of the compressed image in bytes")
    format: str = Field(..., description="Output format (jpeg, png or webp)")
    source_format: str = Field(
        ..., alias="sourceFormat", description="Detected input format (jpeg, png, webp or other)"
    )
    original_size: int = Field(..., alias="originalSize", description="Size of the upload in bytes")
    compression_level: str = Field(
        ..., alias="compressionLevel", description="Compression tier actually applied"
    )
    quality: int = Field(..., description="Encoder quality value used (0-100)")
    width: int = Field(..., description="Image width in pixels")
    height: int = Field(..., description="Image height in pixels")
    space_savings_percent: float = Field(
        ..., alias="spaceSavingsPercent", description="Percentage of space saved"
    )
    compression_ratio: float = Field(
        ..., alias="compressionRatio", description="Compression ratio (original/compressed)"
    )
    compression_time: float = Field(
        ..., alias="compressionTime", description="Time taken for re-encoding in seconds"
    )
    download_filename: str = Field(
        ..., alias="downloadFilename", description="Suggested filename for the download"
    )

    @classmethod
    def from_result(cls, result: CompressionResult, filename: str) -> "CompressionResponse":
        return cls(
            compressed_data_url=result.data_url,
            size=result.size_bytes,
            format=result.output_format,
            source_format=result.source_format,
            original_size=result.original_size,
            compression_level=result.tier,
            quality=result.quality,
            width=result.width,
            height=result.height,
            space_savings_percent=result.space_savings_percent,
            compression_ratio=result.compression_ratio,
            compression_time=result.compression_time,
            download_filename=filename,
            psnr=result.psnr,
            ssim=result.ssim,
        )
