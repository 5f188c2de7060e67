# pixel_representations.py
"""
Binary shapes of the foreign pixels found inside locked platform bitmap rows.

Channel order follows the platform row layout (blue first, alpha last),
not the (r, g, b) order Pillow reports from getpixel().
"""

from __future__ import annotations
from typing import Dict, Union

import numpy as np

from image.pixel_format import PixelFormat

RGB24 = np.dtype([
    ("blue", np.uint8),
    ("green", np.uint8),
    ("red", np.uint8),
])

ARGB32 = np.dtype([
    ("blue", np.uint8),
    ("green", np.uint8),
    ("red", np.uint8),
    ("alpha", np.uint8),
])

INDEX8 = np.dtype(np.uint8)

FOREIGN_PIXELS: Dict[PixelFormat, np.dtype] = {
    PixelFormat.FORMAT_24BPP_RGB: RGB24,
    PixelFormat.FORMAT_32BPP_ARGB: ARGB32,
    PixelFormat.FORMAT_8BPP_INDEXED: INDEX8,
}


def foreign_dtype(pixel_format: PixelFormat) -> np.dtype:
    try:
        return FOREIGN_PIXELS[pixel_format]
    except KeyError:
        raise ValueError(f"No pixel representation for {pixel_format.name}") from None


def row_view(
    scan0: Union[bytearray, memoryview],
    offset: int,
    width: int,
    dtype: np.dtype,
) -> np.ndarray:
    """
    View `width` pixels of `dtype` starting `offset` bytes into a locked row
    buffer. Writes through the view land in the row buffer.
    """
    return np.frombuffer(scan0, dtype=dtype, count=int(width), offset=int(offset))
