"""
Image Compression API Entry Point

This file serves as the main entry point for the application,
importing and running the FastAPI application defined in the app package.

Run with uvicorn:
    uvicorn main:app --reload
"""
import os
import logging
import shutil
import sys

from app.config import get_settings

# Configure logging based on environment variables
LOG_LEVEL = os.environ.get("LOG_LEVEL", get_settings().log_level).upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Configure root logger
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format=LOG_FORMAT,
    stream=sys.stdout
)

# Set up logger
logger = logging.getLogger(__name__)

# Check that required dependencies are installed
try:
    import PIL
    import numpy
    import psutil
    import skimage
    logger.info("All required dependencies are available")
except ImportError as e:
    logger.critical(f"Missing required dependency: {str(e)}")
    logger.critical("Please install all dependencies: pip install -e .")
    sys.exit(1)

from PIL import features

if not features.check_module("webp"):
    logger.warning("Pillow was built without WebP support. WebP output will fail.")

# Check for pngquant when PNG quantization is enabled
settings = get_settings()
if settings.png_quantize:
    if shutil.which(settings.pngquant_path):
        logger.info("pngquant is installed, PNG output will be palette-quantized")
    else:
        logger.warning("pngquant is not installed. PNG output will be lossless only.")

from app import app

__all__ = ['app']

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
        log_level=LOG_LEVEL.lower()
    )
