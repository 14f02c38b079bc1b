"""
Core compression pipeline.

- detect: source format detection
- quality: tier to quality mapping
- encode: format-specific re-encoding
- compressor: the request pipeline and result packaging
"""
from app.core.exceptions import (
    CompressionError,
    MissingInput,
    InvalidImageFormat,
    UploadTooLarge,
    UnsupportedMediaType,
    InvalidRequest,
    EncodingFailed,
    UnexpectedFailure
)

from app.core.detect import ImageInfo, detect_format

from app.core.quality import (
    DEFAULT_TIER,
    QUALITY_BY_TIER,
    normalize_tier,
    resolve_quality
)

from app.core.encode import FALLBACK_FORMAT, encode_image, output_format_for

from app.core.compressor import (
    CompressionResult,
    assemble_result,
    build_data_url,
    compress_image,
    download_filename
)

__all__ = [
    # Errors
    'CompressionError',
    'MissingInput',
    'InvalidImageFormat',
    'UploadTooLarge',
    'UnsupportedMediaType',
    'InvalidRequest',
    'EncodingFailed',
    'UnexpectedFailure',

    # Detection
    'ImageInfo',
    'detect_format',

    # Quality
    'DEFAULT_TIER',
    'QUALITY_BY_TIER',
    'normalize_tier',
    'resolve_quality',

    # Encoding
    'FALLBACK_FORMAT',
    'encode_image',
    'output_format_for',

    # Pipeline
    'CompressionResult',
    'assemble_result',
    'build_data_url',
    'compress_image',
    'download_filename'
]
