"""
Utilities for measuring compression results and image fidelity.
"""
import math
import time
import logging
from io import BytesIO
from typing import Dict, Optional, Tuple

import numpy as np
import psutil
from PIL import Image
from skimage.metrics import peak_signal_noise_ratio, structural_similarity

from app.core.detect import has_alpha

# Set up logging
logger = logging.getLogger(__name__)

# PSNR reported for pixel-identical images instead of infinity
IDENTICAL_PSNR = 100.0


def get_cpu_mem() -> Dict[str, float]:
    """
    Get current CPU and memory usage.

    Returns:
        Dictionary with CPU and memory usage percentages
    """
    return {
        "cpu_usage": psutil.cpu_percent(interval=None),
        "memory_usage": psutil.virtual_memory().percent
    }


def size_statistics(original_size: int, compressed_size: int) -> Dict[str, float]:
    """
    Calculate size savings for a re-encoded image.

    Args:
        original_size: Size of the uploaded file in bytes
        compressed_size: Size of the re-encoded file in bytes

    Returns:
        Dictionary with compression ratio and space savings percentage.
        Savings are negative when the re-encoding grew the file.
    """
    compression_ratio = original_size / compressed_size if compressed_size > 0 else 0
    space_savings = (1 - (compressed_size / original_size)) * 100 if original_size > 0 else 0

    return {
        "compression_ratio": round(compression_ratio, 2),
        "space_savings_percent": round(space_savings, 2),
    }


def _to_rgb_array(data: bytes) -> np.ndarray:
    with Image.open(BytesIO(data)) as img:
        # Composite onto white so transparent regions compare consistently
        if has_alpha(img):
            rgba = img.convert("RGBA")
            background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
            return np.array(Image.alpha_composite(background, rgba).convert("RGB"))
        return np.array(img.convert("RGB"))


def calculate_image_metrics(
    original_data: bytes,
    compressed_data: bytes
) -> Tuple[Optional[float], Optional[float]]:
    """
    Calculate PSNR and SSIM between an original and a re-encoded image.

    Args:
        original_data: Encoded bytes of the original image
        compressed_data: Encoded bytes of the re-encoded image

    Returns:
        Tuple of (PSNR, SSIM) values, rounded to 2 and 4 decimal places respectively.
        Returns (None, None) if calculation fails
    """
    try:
        original = _to_rgb_array(original_data)
        compressed = _to_rgb_array(compressed_data)
    except Exception as e:
        logger.warning(f"Failed to decode images for quality metrics: {e}")
        return None, None

    if original.shape != compressed.shape:
        logger.warning(f"Image shapes don't match: {original.shape} vs {compressed.shape}")
        return None, None

    try:
        mse = np.mean(np.square(original.astype(np.float32) - compressed.astype(np.float32)))
        if mse == 0:
            psnr = IDENTICAL_PSNR
        else:
            psnr = peak_signal_noise_ratio(original, compressed, data_range=255)

        # SSIM needs at least a 7x7 window
        win_size = min(7, original.shape[0], original.shape[1])
        if win_size % 2 == 0:
            win_size -= 1
        if win_size < 3:
            return round(float(psnr), 2), None

        ssim = structural_similarity(
            original, compressed, data_range=255, channel_axis=2, win_size=win_size
        )
    except Exception as e:
        logger.error(f"Error calculating metrics: {e}")
        return None, None

    psnr = float(psnr)
    if math.isinf(psnr) or math.isnan(psnr):
        psnr = IDENTICAL_PSNR
    return round(psnr, 2), round(float(ssim), 4)


class PerformanceTimer:
    """
    Context manager for measuring execution time.

    Example:
        with PerformanceTimer() as timer:
            # Code to measure
        execution_time = timer.execution_time
    """

    def __init__(self):
        self.start_time = None
        self.execution_time = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.execution_time = time.perf_counter() - self.start_time
        return False  # Don't suppress exceptions
