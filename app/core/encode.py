"""
Format-specific re-encoding of uploaded images.

Each supported source format is re-encoded in the same format with tier
specific options. Any other format is normalized to WebP. Pixels are never
resized or cropped.
"""
import logging
import shutil
import subprocess
from io import BytesIO
from typing import Any, Callable, Dict, Optional, Tuple

from PIL import Image

from app.config import Settings, get_settings
from app.core.detect import FORMAT_JPEG, FORMAT_PNG, FORMAT_WEBP, has_alpha
from app.core.exceptions import EncodingFailed

# Set up logging
logger = logging.getLogger(__name__)

# Fallback target for formats without a dedicated encoder
FALLBACK_FORMAT = FORMAT_WEBP

PNG_COMPRESS_LEVEL = 9
WEBP_METHOD = 6

# pngquant exits with this status when the result would fall below --quality min
PNGQUANT_QUALITY_TOO_LOW = 99

# Modes the WebP encoder stores without conversion
WEBP_MODES = ("RGB", "RGBA")


def _metadata_kwargs(img: Image.Image) -> Dict[str, Any]:
    """Carry colour profile and EXIF over to the re-encoded image."""
    kwargs = {}
    if img.info.get("icc_profile"):
        kwargs["icc_profile"] = img.info["icc_profile"]
    if img.info.get("exif"):
        kwargs["exif"] = img.info["exif"]
    return kwargs


def _encode_jpeg(img: Image.Image, quality: int, settings: Settings) -> bytes:
    buffer = BytesIO()
    img.save(
        buffer,
        format="JPEG",
        quality=quality,
        optimize=True,
        progressive=True,
        **_metadata_kwargs(img),
    )
    return buffer.getvalue()


def quantize_with_pngquant(png_data: bytes, quality: int, settings: Settings) -> Optional[bytes]:
    """
    Palette-quantize PNG data with pngquant through stdin/stdout.

    Args:
        png_data: Losslessly encoded PNG bytes
        quality: Target quality (0-100); pngquant gets the range ``quality-10..quality``
        settings: Application settings holding the pngquant path and timeout

    Returns:
        Quantized PNG bytes, or None if pngquant is unavailable or cannot
        reach the requested quality

    Raises:
        EncodingFailed: If pngquant fails for any other reason
    """
    executable = shutil.which(settings.pngquant_path)
    if executable is None:
        logger.warning(f"pngquant not found at '{settings.pngquant_path}', using lossless PNG only")
        return None

    try:
        result = subprocess.run(
            [executable, "--quality", f"{max(0, quality - 10)}-{quality}", "--speed", "1", "-"],
            input=png_data,
            capture_output=True,
            timeout=settings.pngquant_timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise EncodingFailed(f"pngquant timed out after {settings.pngquant_timeout}s") from e

    if result.returncode == PNGQUANT_QUALITY_TOO_LOW:
        logger.info(f"pngquant could not reach quality {quality}, keeping lossless PNG")
        return None
    if result.returncode != 0:
        raise EncodingFailed(
            f"pngquant failed with status {result.returncode}: {result.stderr.decode('utf-8', 'replace')}"
        )
    return result.stdout


def _encode_png(img: Image.Image, quality: int, settings: Settings) -> bytes:
    # The PNG encoder is lossless and has no quality knob; quality only
    # applies when pngquant quantization is enabled.
    buffer = BytesIO()
    img.save(
        buffer,
        format="PNG",
        optimize=True,
        compress_level=PNG_COMPRESS_LEVEL,
        **_metadata_kwargs(img),
    )
    encoded = buffer.getvalue()

    if settings.png_quantize:
        quantized = quantize_with_pngquant(encoded, quality, settings)
        if quantized and len(quantized) < len(encoded):
            return quantized
    return encoded


def _prepare_for_webp(img: Image.Image) -> Image.Image:
    if img.mode in WEBP_MODES:
        return img
    return img.convert("RGBA" if has_alpha(img) else "RGB")


def _encode_webp(img: Image.Image, quality: int, settings: Settings) -> bytes:
    buffer = BytesIO()
    _prepare_for_webp(img).save(
        buffer,
        format="WEBP",
        quality=quality,
        method=WEBP_METHOD,
        **_metadata_kwargs(img),
    )
    return buffer.getvalue()


ENCODERS: Dict[str, Callable[[Image.Image, int, Settings], bytes]] = {
    FORMAT_JPEG: _encode_jpeg,
    FORMAT_PNG: _encode_png,
    FORMAT_WEBP: _encode_webp,
}


def output_format_for(source_format: str) -> str:
    """Return the format an image of ``source_format`` is re-encoded to."""
    return source_format if source_format in ENCODERS else FALLBACK_FORMAT


def encode_image(
    data: bytes,
    source_format: str,
    quality: int,
    settings: Optional[Settings] = None
) -> Tuple[bytes, str]:
    """
    Re-encode image data according to its detected source format.

    Args:
        data: Raw image data that already passed format detection
        source_format: Detected format (jpeg, png, webp or other)
        quality: Encoder quality value (0-100)
        settings: Application settings (defaults to the cached settings)

    Returns:
        Tuple of (encoded_bytes, output_format)

    Raises:
        EncodingFailed: If the codec cannot decode or re-encode the image
    """
    settings = settings or get_settings()
    output_format = output_format_for(source_format)
    encoder = ENCODERS[output_format]

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            encoded = encoder(img, quality, settings)
    except EncodingFailed:
        raise
    except MemoryError as e:
        raise EncodingFailed("Out of memory while re-encoding image") from e
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise EncodingFailed(f"Could not re-encode {source_format} image as {output_format}: {e}") from e

    if not encoded:
        raise EncodingFailed(f"Encoder produced no output for {output_format}")

    return encoded, output_format
