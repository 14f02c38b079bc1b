"""Shared fixtures: images are generated on the fly with Pillow and numpy."""

from io import BytesIO

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app import app
from app.config import Settings, get_settings


def encode(img: Image.Image, fmt: str, **kwargs) -> bytes:
    buffer = BytesIO()
    img.save(buffer, format=fmt, **kwargs)
    return buffer.getvalue()


def photographic_image(size=500, seed=0) -> Image.Image:
    """Smooth gradients with sensor-like noise, compressing like a photo."""
    rng = np.random.default_rng(seed)
    y, x = np.mgrid[0:size, 0:size].astype(np.float32)
    r = 128 + 100 * np.sin(x / 37.0) * np.cos(y / 53.0)
    g = 128 + 90 * np.cos((x + y) / 61.0)
    b = 255 * x / size
    pixels = np.stack([r, g, b], axis=2) + rng.normal(0, 12, (size, size, 3))
    return Image.fromarray(np.clip(pixels, 0, 255).astype(np.uint8), "RGB")


@pytest.fixture
def jpeg_bytes():
    return encode(photographic_image(), "JPEG", quality=95)


@pytest.fixture
def png_rgba_bytes():
    img = photographic_image(64).convert("RGBA")
    alpha = Image.new("L", img.size, 255)
    alpha.paste(0, (0, 0, 32, 32))
    img.putalpha(alpha)
    return encode(img, "PNG")


@pytest.fixture
def webp_bytes():
    return encode(photographic_image(128), "WEBP", quality=90)


@pytest.fixture
def bmp_bytes():
    return encode(photographic_image(96), "BMP")


@pytest.fixture
def gif_bytes():
    img = photographic_image(64).convert("P", palette=Image.Palette.ADAPTIVE)
    return encode(img, "GIF", transparency=0)


@pytest.fixture
def settings():
    return Settings(png_quantize=False)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_settings, None)
