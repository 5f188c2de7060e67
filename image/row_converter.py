# row_converter.py

from __future__ import annotations
from typing import Callable, Dict

import numpy as np

from image.pixel_format import PixelFormat

RowCopier = Callable[[np.ndarray, np.ndarray, int], None]

# Fixed-point luma weights, sum to 1 << 16.
_LUMA_RED = 19595
_LUMA_GREEN = 38469
_LUMA_BLUE = 7472


class RowConverter:
    """
    Copies one row of foreign pixels into native pixels.

    src is a view of a locked platform row (pixel_representations.RGB24 or
    ARGB32), dst is a view of a buffer row in the native dtype. Both hold at
    least `width` pixels.

    Subclasses override the copy_* hooks for the layouts they can read.
    """

    def copy_rgb24(self, src: np.ndarray, dst: np.ndarray, width: int) -> None:
        raise NotImplementedError(f"{self.__class__.__name__}.copy_rgb24 not implemented.")

    def copy_argb32(self, src: np.ndarray, dst: np.ndarray, width: int) -> None:
        raise NotImplementedError(f"{self.__class__.__name__}.copy_argb32 not implemented.")

    def copier_for(self, pixel_format: PixelFormat) -> RowCopier:
        """
        Return the copy routine matching the layout of the source rows.
        """
        copiers: Dict[PixelFormat, RowCopier] = {
            PixelFormat.FORMAT_24BPP_RGB: self.copy_rgb24,
            PixelFormat.FORMAT_32BPP_ARGB: self.copy_argb32,
        }
        try:
            return copiers[pixel_format]
        except KeyError:
            raise ValueError(f"{self.__class__.__name__} cannot read {pixel_format.name} rows") from None


class Rgb24RowConverter(RowConverter):

    def copy_rgb24(self, src: np.ndarray, dst: np.ndarray, width: int) -> None:
        dst[:width] = src[:width]

    def copy_argb32(self, src: np.ndarray, dst: np.ndarray, width: int) -> None:
        s = src[:width]
        d = dst[:width]
        d["blue"] = s["blue"]
        d["green"] = s["green"]
        d["red"] = s["red"]


class Argb32RowConverter(RowConverter):

    def copy_rgb24(self, src: np.ndarray, dst: np.ndarray, width: int) -> None:
        s = src[:width]
        d = dst[:width]
        d["blue"] = s["blue"]
        d["green"] = s["green"]
        d["red"] = s["red"]
        d["alpha"] = 255

    def copy_argb32(self, src: np.ndarray, dst: np.ndarray, width: int) -> None:
        dst[:width] = src[:width]


class Gray8RowConverter(RowConverter):
    """Luma only; alpha is ignored."""

    @staticmethod
    def _luma(src: np.ndarray) -> np.ndarray:
        r = src["red"].astype(np.uint32)
        g = src["green"].astype(np.uint32)
        b = src["blue"].astype(np.uint32)
        return ((r * _LUMA_RED + g * _LUMA_GREEN + b * _LUMA_BLUE) >> 16).astype(np.uint8)

    def copy_rgb24(self, src: np.ndarray, dst: np.ndarray, width: int) -> None:
        dst[:width] = self._luma(src[:width])

    def copy_argb32(self, src: np.ndarray, dst: np.ndarray, width: int) -> None:
        dst[:width] = self._luma(src[:width])
