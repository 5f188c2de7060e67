# image_u8.py

from __future__ import annotations

import numpy as np

from image.image_buffer import ImageBuffer
from image.pixel_format import PixelFormat
from image.platform_image import PlatformImage
from image.row_converter import Gray8RowConverter, RowConverter

GRAYSCALE_PALETTE = [(i, i, i) for i in range(256)]


class ImageU8(ImageBuffer):
    """
    One byte of luma per pixel.

    Exports 8bpp indexed bitmaps whose palette maps index i to gray (i, i, i),
    so the index bytes are the luma values themselves.
    """

    dtype = np.dtype(np.uint8)
    export_format = PixelFormat.FORMAT_8BPP_INDEXED

    def create_row_converter(self) -> RowConverter:
        return Gray8RowConverter()

    def init_palette(self, bitmap: PlatformImage) -> None:
        bitmap.set_palette(GRAYSCALE_PALETTE)

    def encode_row(self, src: np.ndarray, dst: np.ndarray, width: int) -> None:
        dst[:width] = src[:width]
