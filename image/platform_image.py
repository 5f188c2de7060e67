# platform_image.py

from __future__ import annotations
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from image.lock_mode import LockMode
from image.pixel_format import PixelFormat

logger = logging.getLogger(__name__)


@dataclass
class BitmapData:
    """
    Row buffer handed out while a PlatformImage is locked.

    Row y starts at byte y * stride of scan0 and holds `width` pixels in
    pixel_format's layout, followed by padding up to `stride` bytes.
    """

    scan0: bytearray
    stride: int
    width: int
    height: int
    pixel_format: PixelFormat
    lock_mode: LockMode

    def row_offset(self, y: int) -> int:
        return int(y) * self.stride


class PlatformImage:
    """
    Decoded bitmap with row-level locked access, backed by a Pillow Image.

    The pixel format is derived from the Pillow mode. Rows are exposed in
    the platform byte order (BGR / BGRA) and padded to 4-byte strides.
    """

    def __init__(self, image: Image.Image) -> None:
        if image is None:
            raise ValueError("image is None")
        self._image = image
        self._locked = False

    # --------------------------------------------------
    # Construction
    # --------------------------------------------------
    @classmethod
    def new(
        cls,
        width: int,
        height: int,
        pixel_format: PixelFormat = PixelFormat.FORMAT_32BPP_ARGB,
    ) -> "PlatformImage":
        if not pixel_format.is_defined:
            raise ValueError(f"Cannot create a bitmap in {pixel_format.name}")
        return cls(Image.new(pixel_format.mode, (int(width), int(height))))

    @classmethod
    def open(cls, file_path: Path) -> "PlatformImage":
        """
        Open and decode an image file. Codec and I/O errors propagate as-is.
        """
        from filesystem.file_utils import FileUtils
        return cls(FileUtils.load_image(file_path))

    # --------------------------------------------------
    # Properties
    # --------------------------------------------------
    @property
    def pil(self) -> Image.Image:
        return self._image

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def size(self) -> Tuple[int, int]:
        return self._image.size

    @property
    def pixel_format(self) -> PixelFormat:
        return PixelFormat.from_mode(self._image.mode)

    @property
    def is_locked(self) -> bool:
        return self._locked

    @property
    def palette(self) -> Optional[List[int]]:
        return self._image.getpalette()

    def set_palette(self, colors: Sequence[Tuple[int, int, int]]) -> None:
        if self.pixel_format is not PixelFormat.FORMAT_8BPP_INDEXED:
            raise ValueError(f"Only indexed bitmaps have a palette, got mode {self._image.mode!r}")
        flat = [int(channel) for color in colors for channel in color]
        self._image.putpalette(flat)

    def pixel(self, x: int, y: int):
        return self._image.getpixel((int(x), int(y)))

    # --------------------------------------------------
    # Normalization helpers
    # --------------------------------------------------
    def clone(self, pixel_format: PixelFormat) -> "PlatformImage":
        """
        Copy of this bitmap converted to pixel_format.
        """
        if not pixel_format.is_defined:
            raise ValueError(f"Cannot clone into {pixel_format.name}")
        if self._image.mode == pixel_format.mode:
            return PlatformImage(self._image.copy())
        return PlatformImage(self._image.convert(pixel_format.mode))

    def draw_image(self, source: "PlatformImage", x: int = 0, y: int = 0) -> None:
        """
        Render source onto this bitmap with its top-left corner at (x, y).
        Pillow converts the source into this bitmap's mode while pasting.
        """
        if source is None:
            raise ValueError("source is None")
        self._image.paste(source.pil, (int(x), int(y)))

    # --------------------------------------------------
    # Row locking
    # --------------------------------------------------
    @contextmanager
    def lock_bits(self, lock_mode: LockMode = LockMode.READ_ONLY) -> Iterator[BitmapData]:
        """
        Lock the whole bitmap and yield its rows as BitmapData.

        Write modes commit scan0 back into the image when the block exits
        normally. The lock is released on every exit path; if the block
        raises, nothing is committed.
        """
        pixel_format = self.pixel_format
        if not pixel_format.is_defined:
            raise ValueError(f"Cannot lock a bitmap in mode {self._image.mode!r}")
        if self._locked:
            raise RuntimeError("Bitmap region is already locked")

        self._image.load()
        width, height = self._image.size
        stride = pixel_format.stride_for(width)
        row_bytes = pixel_format.packed_row_bytes(width)

        scan0 = bytearray(stride * height)
        if lock_mode.reads:
            packed = self._image.tobytes("raw", pixel_format.rawmode)
            rows = np.frombuffer(scan0, dtype=np.uint8).reshape(height, stride)
            rows[:, :row_bytes] = np.frombuffer(packed, dtype=np.uint8).reshape(height, row_bytes)

        data = BitmapData(scan0, stride, width, height, pixel_format, lock_mode)
        self._locked = True
        logger.debug(f"Locked {width}x{height} {pixel_format.name} bitmap ({lock_mode.name}, stride={stride})")
        try:
            yield data
            if lock_mode.writes:
                self._commit(data, row_bytes)
        finally:
            self._locked = False
            logger.debug(f"Unlocked {width}x{height} {pixel_format.name} bitmap")

    def _commit(self, data: BitmapData, row_bytes: int) -> None:
        rows = np.frombuffer(data.scan0, dtype=np.uint8).reshape(data.height, data.stride)
        packed = rows[:, :row_bytes].tobytes()
        self._image.frombytes(packed, "raw", data.pixel_format.rawmode)

    # --------------------------------------------------
    # Lifetime
    # --------------------------------------------------
    def dispose(self) -> None:
        self._image.close()

    def __enter__(self) -> "PlatformImage":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return f"PlatformImage({self.width}x{self.height}, {self.pixel_format.name})"
