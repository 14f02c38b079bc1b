"""Tests for size and fidelity metrics."""

from app.utils.metrics import (
    IDENTICAL_PSNR,
    PerformanceTimer,
    calculate_image_metrics,
    get_cpu_mem,
    size_statistics,
)
from conftest import encode, photographic_image


def test_size_statistics():
    stats = size_statistics(200_000, 50_000)
    assert stats == {"compression_ratio": 4.0, "space_savings_percent": 75.0}


def test_size_statistics_reports_growth_as_negative_savings():
    assert size_statistics(100, 150)["space_savings_percent"] == -50.0


def test_size_statistics_handles_zero_sizes():
    assert size_statistics(0, 0) == {"compression_ratio": 0, "space_savings_percent": 0}


def test_identical_images_have_maximum_fidelity(png_rgba_bytes):
    psnr, ssim = calculate_image_metrics(png_rgba_bytes, png_rgba_bytes)
    assert psnr == IDENTICAL_PSNR
    assert ssim == 1.0


def test_lower_quality_lowers_psnr():
    original = encode(photographic_image(128), "PNG")
    fine = encode(photographic_image(128), "JPEG", quality=90)
    coarse = encode(photographic_image(128), "JPEG", quality=20)

    psnr_fine, _ = calculate_image_metrics(original, fine)
    psnr_coarse, _ = calculate_image_metrics(original, coarse)
    assert psnr_coarse < psnr_fine


def test_metrics_on_undecodable_data_return_none(png_rgba_bytes):
    assert calculate_image_metrics(png_rgba_bytes, b"garbage") == (None, None)


def test_cpu_mem_keys():
    usage = get_cpu_mem()
    assert set(usage) == {"cpu_usage", "memory_usage"}


def test_performance_timer():
    with PerformanceTimer() as timer:
        sum(range(1000))
    assert timer.execution_time >= 0
