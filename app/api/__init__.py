"""
API module for the image compression application.
"""
import logging
import platform
import shutil
import subprocess
import time

import PIL
import psutil
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from PIL import features

from app.config import get_settings
from app.core.exceptions import CompressionError, InvalidRequest, MissingInput
from app.api.v1 import router as v1_router, legacy_router
from app.utils.metrics import get_cpu_mem

# Set up logging
logger = logging.getLogger(__name__)

settings = get_settings()

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="""
    API for reducing the size of raster images at three compression levels:
    - **low**: quality 80
    - **medium**: quality 60 (default)
    - **high**: quality 40

    JPEG, PNG and WebP images keep their format; other formats are converted to WebP.
    PNG output is lossless unless the server enables PNG_QUANTIZE (pngquant), so the
    compression level has no effect on PNG size by default.
    """,
    version=settings.app_version
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_credentials="*" not in settings.allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Original-Size", "X-Source-Format", "X-Quality"],
)

# Include routers
app.include_router(v1_router, prefix="/api")
app.include_router(legacy_router, prefix="/api")


def error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "code": code})


@app.exception_handler(CompressionError)
async def compression_exception_handler(request: Request, exc: CompressionError):
    """Convert compression failures into the JSON error payload."""
    if exc.is_client_error:
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    else:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(exc.status_code, exc.public_message, exc.code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Report unparsable form fields with the JSON error payload.

    An ``image`` field that is not a file upload counts as a missing image.
    """
    fields = [str(error.get("loc", ())[-1]) for error in exc.errors() if error.get("loc")]
    if "image" in fields:
        error = MissingInput(f"Field 'image' is not a file upload: {exc.errors()}")
    else:
        error = InvalidRequest(
            f"Invalid form fields {fields}: {exc.errors()}",
            public_message=f"Invalid value for field(s): {', '.join(fields)}" if fields else None,
        )
    return await compression_exception_handler(request, error)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unexpected errors."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return error_response(500, CompressionError.public_message, "UnexpectedFailure")


def _pngquant_status() -> dict:
    executable = shutil.which(settings.pngquant_path)
    if executable is None:
        return {"status": "missing", "enabled": settings.png_quantize}
    try:
        result = subprocess.run(
            [executable, "--version"], capture_output=True, text=True, check=True, timeout=5
        )
    except (subprocess.SubprocessError, OSError) as e:
        return {"status": "error", "enabled": settings.png_quantize, "message": str(e)}
    return {"status": "ok", "enabled": settings.png_quantize, "version": result.stdout.strip()}


# Health check endpoints
@app.get("/health")
async def health_check():
    """Check if the API is running."""
    return {"status": "healthy", "version": settings.app_version}


@app.get("/health/detailed")
async def detailed_health_check():
    """
    Provides detailed health information including system metrics and codec support.
    """
    system_info = {
        **get_cpu_mem(),
        "disk_usage": psutil.disk_usage('/').percent,
        "python_version": platform.python_version(),
        "platform": platform.platform()
    }

    codecs = {
        "pillow_version": PIL.__version__,
        "jpeg": features.check_codec("jpg"),
        "png": features.check_codec("zlib"),
        "webp": features.check_module("webp"),
        "pngquant": _pngquant_status(),
    }

    return {
        "status": "healthy",
        "version": settings.app_version,
        "system": system_info,
        "codecs": codecs,
        "max_upload_size": settings.max_upload_size,
        "timestamp": time.time()
    }
