"""Tests for the full compression pipeline."""

import base64

import pytest

from app.core import compressor
from app.core.compressor import assemble_result, build_data_url, compress_image, download_filename
from app.core.exceptions import EncodingFailed, InvalidImageFormat, MissingInput, UnexpectedFailure


def test_medium_jpeg_scenario(jpeg_bytes, settings):
    """500x500 photographic JPEG at the default tier."""
    result = compress_image(jpeg_bytes, "medium", settings=settings)

    assert result.output_format == "jpeg"
    assert result.source_format == "jpeg"
    assert result.quality == 60
    assert result.size_bytes == len(result.encoded_bytes)
    assert result.size_bytes < len(jpeg_bytes)
    assert result.original_size == len(jpeg_bytes)
    assert result.data_url.startswith("data:image/jpeg;base64,")
    assert result.space_savings_percent > 0


def test_missing_tier_defaults_to_medium(jpeg_bytes, settings):
    result = compress_image(jpeg_bytes, None, settings=settings)
    assert result.tier == "medium"
    assert result.quality == 60


def test_png_with_transparency_low_tier(png_rgba_bytes, settings):
    result = compress_image(png_rgba_bytes, "low", settings=settings)
    assert result.output_format == "png"
    assert result.quality == 80
    assert result.mime_type == "image/png"


def test_bmp_is_normalized_to_webp(bmp_bytes, settings):
    result = compress_image(bmp_bytes, "high", settings=settings)
    assert result.source_format == "other"
    assert result.detected_format == "BMP"
    assert result.output_format == "webp"
    assert result.size_bytes > 0
    assert result.data_url.startswith("data:image/webp;base64,")


@pytest.mark.parametrize("data", [None, b""])
def test_missing_input_never_reaches_encoder(monkeypatch, data):
    def fail_encode(*args, **kwargs):
        raise AssertionError("encoder must not be invoked")

    monkeypatch.setattr(compressor, "encode_image", fail_encode)
    with pytest.raises(MissingInput) as exc_info:
        compress_image(data, "low")
    assert exc_info.value.status_code == 400


def test_invalid_image_gives_no_output(monkeypatch):
    def fail_encode(*args, **kwargs):
        raise AssertionError("encoder must not be invoked")

    monkeypatch.setattr(compressor, "encode_image", fail_encode)
    with pytest.raises(InvalidImageFormat):
        compress_image(b"%PDF-1.7 definitely not an image", "medium")


def test_encoding_failure_propagates(monkeypatch, jpeg_bytes):
    def broken_encode(*args, **kwargs):
        raise EncodingFailed("codec exploded")

    monkeypatch.setattr(compressor, "encode_image", broken_encode)
    with pytest.raises(EncodingFailed) as exc_info:
        compress_image(jpeg_bytes, "medium")
    assert exc_info.value.status_code == 500
    assert "codec exploded" not in exc_info.value.public_message


def test_unexpected_errors_are_wrapped(monkeypatch, jpeg_bytes):
    def buggy_encode(*args, **kwargs):
        raise KeyError("internal")

    monkeypatch.setattr(compressor, "encode_image", buggy_encode)
    with pytest.raises(UnexpectedFailure) as exc_info:
        compress_image(jpeg_bytes, "medium")
    assert exc_info.value.public_message == "Failed to process image"


def test_metrics_are_optional(jpeg_bytes, settings):
    without = compress_image(jpeg_bytes, "high", settings=settings)
    assert without.psnr is None and without.ssim is None

    with_metrics = compress_image(jpeg_bytes, "high", include_metrics=True, settings=settings)
    assert with_metrics.psnr > 20
    assert 0 < with_metrics.ssim <= 1


def test_assemble_result_counts_bytes():
    result = assemble_result(
        b"12345", "other", "webp",
        original_size=10, tier="low", quality=80, width=1, height=1, detected_format="BMP",
    )
    assert result.size_bytes == 5
    assert result.space_savings_percent == 50.0
    assert result.compression_ratio == 2.0


def test_build_data_url_round_trips_payload():
    url = build_data_url(b"\x00\x01binary", "image/png")
    prefix, payload = url.split(",", 1)
    assert prefix == "data:image/png;base64"
    assert base64.b64decode(payload) == b"\x00\x01binary"


@pytest.mark.parametrize("filename, output_format, expected", [
    ("photo.jpg", "jpeg", "compressed-photo.jpg"),
    ("scan.bmp", "webp", "compressed-scan.webp"),
    ("../../etc/logo.png", "png", "compressed-logo.png"),
    (None, "webp", "compressed-image.webp"),
])
def test_download_filename(filename, output_format, expected):
    assert download_filename(filename, output_format) == expected
