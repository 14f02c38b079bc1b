"""
Compression request pipeline.

``compress_image`` runs the whole request: detect the source format,
resolve the tier's quality value, re-encode, and package the result.
Nothing is retained between calls.
"""
import base64
import logging
import os
from dataclasses import dataclass
from typing import Optional

from app.config import Settings
from app.core.detect import detect_format
from app.core.encode import encode_image
from app.core.exceptions import CompressionError, MissingInput, UnexpectedFailure
from app.core.quality import normalize_tier, resolve_quality
from app.utils.metrics import PerformanceTimer, calculate_image_metrics, size_statistics

# Set up logging
logger = logging.getLogger(__name__)

# File extension used for downloads of each output format
EXTENSIONS = {
    "jpeg": ".jpg",
    "png": ".png",
    "webp": ".webp",
}


@dataclass
class CompressionResult:
    """A re-encoded image together with its size accounting."""
    encoded_bytes: bytes
    source_format: str
    output_format: str
    size_bytes: int
    original_size: int
    tier: str
    quality: int
    width: int
    height: int
    detected_format: str
    compression_time: float = 0.0
    psnr: Optional[float] = None
    ssim: Optional[float] = None

    @property
    def mime_type(self) -> str:
        return f"image/{self.output_format}"

    @property
    def data_url(self) -> str:
        return build_data_url(self.encoded_bytes, self.mime_type)

    @property
    def space_savings_percent(self) -> float:
        return size_statistics(self.original_size, self.size_bytes)["space_savings_percent"]

    @property
    def compression_ratio(self) -> float:
        return size_statistics(self.original_size, self.size_bytes)["compression_ratio"]


def build_data_url(data: bytes, mime_type: str) -> str:
    """Build a ``data:`` URL embedding the payload as base64."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def download_filename(original_filename: Optional[str], output_format: str) -> str:
    """
    Name offered for downloading a compressed image.

    The original stem is kept and the extension follows the output format,
    e.g. ``photo.bmp`` becomes ``compressed-photo.webp``.
    """
    stem = os.path.splitext(os.path.basename(original_filename or ""))[0] or "image"
    return f"compressed-{stem}{EXTENSIONS.get(output_format, '.' + output_format)}"


def assemble_result(
    encoded_bytes: bytes,
    source_format: str,
    output_format: str,
    **details
) -> CompressionResult:
    """Package re-encoded bytes into a CompressionResult."""
    return CompressionResult(
        encoded_bytes=encoded_bytes,
        source_format=source_format,
        output_format=output_format,
        size_bytes=len(encoded_bytes),
        **details
    )


def compress_image(
    data: Optional[bytes],
    tier: Optional[str] = None,
    include_metrics: bool = False,
    settings: Optional[Settings] = None
) -> CompressionResult:
    """
    Re-encode an image at the requested compression tier.

    Args:
        data: Raw bytes of the uploaded image
        tier: Compression tier (low, medium or high); anything else means medium
        include_metrics: Whether to compute PSNR/SSIM against the original
        settings: Application settings (defaults to the cached settings)

    Returns:
        CompressionResult for the re-encoded image

    Raises:
        MissingInput: If no image bytes were provided
        InvalidImageFormat: If the bytes are not a recognizable image
        EncodingFailed: If re-encoding fails
        UnexpectedFailure: For any other fault
    """
    if not data:
        raise MissingInput("Request carried no image bytes")

    try:
        info = detect_format(data)
        applied_tier = normalize_tier(tier)
        quality = resolve_quality(applied_tier)

        logger.info(
            f"Compressing {info.pil_format} image ({len(data)} bytes, {info.width}x{info.height}) "
            f"at tier '{applied_tier}' (quality {quality})"
        )

        with PerformanceTimer() as timer:
            encoded, output_format = encode_image(data, info.source_format, quality, settings)

        result = assemble_result(
            encoded,
            info.source_format,
            output_format,
            original_size=len(data),
            tier=applied_tier,
            quality=quality,
            width=info.width,
            height=info.height,
            detected_format=info.pil_format,
            compression_time=round(timer.execution_time, 4),
        )
    except CompressionError:
        raise
    except Exception as e:
        logger.error(f"Unexpected failure while compressing image: {e}", exc_info=True)
        raise UnexpectedFailure(str(e)) from e

    if include_metrics:
        result.psnr, result.ssim = calculate_image_metrics(data, encoded)

    logger.info(
        f"Compressed {result.source_format} -> {result.output_format}: "
        f"{result.original_size} -> {result.size_bytes} bytes "
        f"({result.space_savings_percent}% saved)"
    )
    return result
