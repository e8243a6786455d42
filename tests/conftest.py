"""
Pytest configuration and shared fixtures for Raster Edit tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

from io import BytesIO

import pytest
from PIL import Image

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)


def encode(image, format="PNG"):
    buffer = BytesIO()
    image.save(buffer, format=format)
    return buffer.getvalue()


@pytest.fixture
def white_image():
    """200x200 opaque white RGBA image."""
    return Image.new("RGBA", (200, 200), WHITE)


@pytest.fixture
def quadrant_image():
    """
    200x200 image: top-left 100x100 quadrant red, the rest blue.

    Useful for telling rotations and crops apart.
    """
    image = Image.new("RGBA", (200, 200), BLUE)
    image.paste(Image.new("RGBA", (100, 100), RED), (0, 0))
    return image


@pytest.fixture
def png_bytes(quadrant_image):
    """PNG-encoded bytes of the quadrant image."""
    return encode(quadrant_image)


@pytest.fixture
def wide_png_bytes():
    """PNG-encoded bytes of a 300x200 green image."""
    return encode(Image.new("RGB", (300, 200), (0, 200, 0)))
