"""
Image compression endpoints.

Accepts a multipart upload with the image and a compression level and
returns the re-encoded image either embedded in JSON as a data URL or as
a raw download.
"""
import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from app.config import Settings, get_settings
from app.core.compressor import CompressionResult, compress_image, download_filename
from app.core.exceptions import MissingInput, UnsupportedMediaType, UploadTooLarge
from app.models import CompressionResponse, ErrorResponse

# Set up logging
logger = logging.getLogger(__name__)

# Create routers; the unversioned route serves the browser client
router = APIRouter(prefix="/v1", tags=["Image Compression v1"])
legacy_router = APIRouter(tags=["Image Compression"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "No image provided or invalid image"},
    413: {"model": ErrorResponse, "description": "Image exceeds the upload size limit"},
    415: {"model": ErrorResponse, "description": "Uploaded file is not an image"},
    500: {"model": ErrorResponse, "description": "Image could not be processed"},
}

# Sent by some clients when they cannot tell the file type
GENERIC_CONTENT_TYPES = ("application/octet-stream",)


async def read_upload(image: Optional[UploadFile], settings: Settings) -> bytes:
    """
    Read an uploaded image, enforcing presence, type and size limits.

    Raises:
        MissingInput: If no file or an empty file was uploaded
        UnsupportedMediaType: If the declared content type is not an image type
        UploadTooLarge: If the file exceeds the configured size limit
    """
    if image is None:
        raise MissingInput("No 'image' field in request")

    content_type = (image.content_type or "").lower()
    if content_type and not content_type.startswith("image/") and content_type not in GENERIC_CONTENT_TYPES:
        raise UnsupportedMediaType(f"Rejected upload with content type {content_type}")

    # Read one byte past the limit to detect oversized uploads without buffering them fully
    data = await image.read(settings.max_upload_size + 1)
    if len(data) > settings.max_upload_size:
        limit_mb = settings.max_upload_size / (1024 * 1024)
        raise UploadTooLarge(
            f"Upload {image.filename} exceeds {settings.max_upload_size} bytes",
            public_message=f"Image file exceeds the {limit_mb:g} MB limit",
        )
    if not data:
        raise MissingInput(f"Uploaded file {image.filename!r} is empty")

    return data


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII filename plus the RFC 5987 UTF-8 form."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "_").replace("\\", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


async def _compress_upload(
    image: Optional[UploadFile],
    compression_level: Optional[str],
    include_metrics: bool,
    settings: Settings
) -> CompressionResult:
    data = await read_upload(image, settings)
    logger.info(f"Received {image.filename} ({len(data)} bytes), compression level {compression_level!r}")
    return await run_in_threadpool(
        compress_image, data, compression_level, include_metrics, settings
    )


@legacy_router.post("/compress", response_model=CompressionResponse, responses=ERROR_RESPONSES)
@router.post("/compress", response_model=CompressionResponse, responses=ERROR_RESPONSES)
async def compress_image_endpoint(
    image: Optional[UploadFile] = File(None, description="The image file to compress"),
    compression_level: Optional[str] = Form(
        None, alias="compressionLevel", description="Compression level: low, medium (default) or high"
    ),
    include_metrics: bool = Form(
        False, alias="includeMetrics", description="Whether to compute PSNR/SSIM"
    ),
    settings: Settings = Depends(get_settings)
):
    """
    Compress an uploaded image.

    - **image**: The image file to compress
    - **compressionLevel**: low, medium or high; unrecognized values mean medium
    - **includeMetrics**: Whether to include PSNR and SSIM in the response

    JPEG, PNG and WebP images keep their format; other formats are converted to WebP.
    PNG output is lossless, so the compression level only changes PNG size when
    the server runs with PNG_QUANTIZE enabled.

    Returns:
        The compressed image as a data URL together with its size and format
    """
    result = await _compress_upload(image, compression_level, include_metrics, settings)
    return CompressionResponse.from_result(
        result, download_filename(image.filename, result.output_format)
    )


@router.post("/compress/raw", response_class=Response, responses=ERROR_RESPONSES)
async def compress_image_raw(
    image: Optional[UploadFile] = File(None, description="The image file to compress"),
    compression_level: Optional[str] = Form(
        None, alias="compressionLevel", description="Compression level: low, medium (default) or high"
    ),
    settings: Settings = Depends(get_settings)
):
    """
    Compress an uploaded image and return it as a file download.

    Size accounting is returned in the ``X-Original-Size``, ``X-Source-Format``
    and ``X-Quality`` headers.
    """
    result = await _compress_upload(image, compression_level, False, settings)
    filename = download_filename(image.filename, result.output_format)

    return Response(
        content=result.encoded_bytes,
        media_type=result.mime_type,
        headers={
            "Content-Disposition": content_disposition(filename),
            "X-Original-Size": str(result.original_size),
            "X-Source-Format": result.source_format,
            "X-Quality": str(result.quality),
        },
    )
