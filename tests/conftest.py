"""Shared fixtures: small synthetic Pillow images with known pixels."""

import pytest
from PIL import Image


def make_image(mode, rows):
    """Build a Pillow image from rows of pixel tuples (row-major, top row first)."""
    height = len(rows)
    width = len(rows[0])
    image = Image.new(mode, (width, height))
    for y, row in enumerate(rows):
        for x, value in enumerate(row):
            image.putpixel((x, y), value)
    return image


@pytest.fixture
def rgb_2x2():
    """The 2x2 scenario: red, green / blue, white."""
    return make_image("RGB", [
        [(255, 0, 0), (0, 255, 0)],
        [(0, 0, 255), (255, 255, 255)],
    ])


@pytest.fixture
def rgb_odd():
    """5x3 RGB image; 5 * 3 bytes per row forces stride padding."""
    return make_image("RGB", [
        [((x * 50) % 256, (y * 80) % 256, (x * y * 17) % 256) for x in range(5)]
        for y in range(3)
    ])


@pytest.fixture
def rgba_odd():
    """3x4 RGBA image with varying alpha."""
    return make_image("RGBA", [
        [((x * 70) % 256, (y * 60) % 256, (x + y) * 20, (x * 40 + y * 30) % 256) for x in range(3)]
        for y in range(4)
    ])


@pytest.fixture
def cmyk_image():
    return make_image("CMYK", [
        [(0, 255, 255, 0), (255, 0, 255, 0), (0, 0, 0, 0)],
        [(255, 255, 0, 0), (0, 0, 0, 255), (30, 60, 90, 20)],
    ])
