# image_rgb24.py

from __future__ import annotations

import numpy as np

from image.image_buffer import ImageBuffer
from image.pixel_format import PixelFormat
from image.pixel_representations import RGB24
from image.row_converter import RowConverter, Rgb24RowConverter


class ImageRgb24(ImageBuffer):
    """3 bytes per pixel, blue-green-red. Exports 24bpp RGB bitmaps."""

    dtype = RGB24
    export_format = PixelFormat.FORMAT_24BPP_RGB

    def create_row_converter(self) -> RowConverter:
        return Rgb24RowConverter()

    def encode_row(self, src: np.ndarray, dst: np.ndarray, width: int) -> None:
        dst[:width] = src[:width]
