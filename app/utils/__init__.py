"""
Utility functions for the image compression application.
"""
from app.utils.metrics import (
    get_cpu_mem,
    size_statistics,
    calculate_image_metrics,
    PerformanceTimer
)

__all__ = [
    'get_cpu_mem',
    'size_statistics',
    'calculate_image_metrics',
    'PerformanceTimer'
]
