"""
Source format detection.

Only the image header is parsed here; pixel data is decoded later by the
encoder.
"""
import logging
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from app.core.exceptions import InvalidImageFormat

# Set up logging
logger = logging.getLogger(__name__)

# Source formats with a dedicated encoder; everything else is "other"
FORMAT_JPEG = "jpeg"
FORMAT_PNG = "png"
FORMAT_WEBP = "webp"
FORMAT_OTHER = "other"

# Pillow format names mapped to source formats.
# MPO is the multi-picture JPEG variant written by many cameras.
PIL_FORMATS = {
    "JPEG": FORMAT_JPEG,
    "MPO": FORMAT_JPEG,
    "PNG": FORMAT_PNG,
    "WEBP": FORMAT_WEBP,
}


@dataclass(frozen=True)
class ImageInfo:
    """Header information about an uploaded image."""
    source_format: str
    pil_format: str
    width: int
    height: int
    mode: str
    has_alpha: bool


def has_alpha(img: Image.Image) -> bool:
    """Whether the image carries an alpha channel or a transparent palette entry."""
    return img.mode in ("RGBA", "LA", "PA", "La", "RGBa") or "transparency" in img.info


def detect_format(data: bytes) -> ImageInfo:
    """
    Identify the encoding of raw image bytes.

    Args:
        data: Raw image data as bytes

    Returns:
        ImageInfo describing the source encoding and dimensions

    Raises:
        InvalidImageFormat: If the bytes are not a recognizable image
    """
    if not data:
        raise InvalidImageFormat("Empty image payload")

    try:
        with Image.open(BytesIO(data)) as img:
            pil_format = img.format
            width, height = img.size
            mode = img.mode
            alpha = has_alpha(img)
    except UnidentifiedImageError as e:
        raise InvalidImageFormat(f"Unrecognized image data: {e}") from e
    except Image.DecompressionBombError as e:
        raise InvalidImageFormat(
            str(e), public_message="Image dimensions are too large to process"
        ) from e
    except (OSError, SyntaxError, ValueError) as e:
        # Truncated or malformed headers
        raise InvalidImageFormat(f"Could not read image header: {e}") from e

    if not pil_format:
        raise InvalidImageFormat("Codec returned no format for image data")

    source_format = PIL_FORMATS.get(pil_format, FORMAT_OTHER)
    logger.debug(f"Detected {pil_format} image ({width}x{height}, {mode}) as '{source_format}'")

    return ImageInfo(
        source_format=source_format,
        pil_format=pil_format,
        width=width,
        height=height,
        mode=mode,
        has_alpha=alpha,
    )
