# image_argb32.py

from __future__ import annotations

import numpy as np

from image.image_buffer import ImageBuffer
from image.pixel_format import PixelFormat
from image.pixel_representations import ARGB32
from image.row_converter import Argb32RowConverter, RowConverter


class ImageArgb32(ImageBuffer):
    """4 bytes per pixel, blue-green-red-alpha. Exports 32bpp ARGB bitmaps."""

    dtype = ARGB32
    export_format = PixelFormat.FORMAT_32BPP_ARGB

    def create_row_converter(self) -> RowConverter:
        return Argb32RowConverter()

    def encode_row(self, src: np.ndarray, dst: np.ndarray, width: int) -> None:
        dst[:width] = src[:width]
