# image_buffer.py

from __future__ import annotations
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Tuple

import numpy as np

from image.bitmap_bridge import BitmapBridge
from image.pixel_format import PixelFormat
from image.platform_image import PlatformImage
from image.roi import ROI
from image.row_converter import RowConverter

if TYPE_CHECKING:
    from PIL import Image

logger = logging.getLogger(__name__)


class ImageBuffer:
    """
    Width x Height pixels of one fixed native layout, stored in a single
    contiguous block of bytes.

    The block is either owned (allocated here, released by dispose()) or
    borrowed from the caller (wrapped, never released here). Ownership can
    be handed out with release_ownership(), never duplicated.

    Subclasses pick the pixel layout and supply:
        - dtype                  native pixel layout (numpy dtype)
        - export_format          PixelFormat written by to_bitmap()
        - create_row_converter() decode strategy for foreign rows
        - encode_row()           native row -> export_format row
        - init_palette()         optional hook for indexed exports
    """

    dtype: Optional[np.dtype] = None
    export_format: PixelFormat = PixelFormat.UNDEFINED

    def __init__(self, width: int, height: int, data: Any = None) -> None:
        """
        Allocate a zeroed owning buffer, or wrap `data` when it is given.

        `data` may be any writable buffer (bytearray, numpy array, ctypes
        array, memoryview) of at least byte_count bytes. The caller keeps
        ownership of it.
        """
        self._address: Optional[np.ndarray] = None
        self._is_owner = False

        self._width = int(width)
        self._height = int(height)
        if self._width <= 0:
            raise ValueError(f"width must be > 0, got {width}")
        if self._height <= 0:
            raise ValueError(f"height must be > 0, got {height}")
        if self.dtype is None:
            raise TypeError(f"{self.__class__.__name__} does not define a pixel dtype")

        self._length = self._width * self._height
        self._element_size = np.dtype(self.dtype).itemsize
        self._byte_count = self._element_size * self._length
        self._roi = ROI()
        self._converter = self.create_row_converter()

        if data is None:
            self._address = np.zeros(self._byte_count, dtype=np.uint8)
            self._is_owner = True
            logger.debug(f"Allocated {self._byte_count} bytes for {self!r}")
        else:
            self._address = self._wrap_memory(data, self._byte_count)

    @classmethod
    def wrap(cls, width: int, height: int, data: Any) -> "ImageBuffer":
        """Non-owning view over caller memory."""
        if data is None:
            raise ValueError("data is None")
        return cls(width, height, data)

    @staticmethod
    def _wrap_memory(data: Any, byte_count: int) -> np.ndarray:
        view = np.frombuffer(data, dtype=np.uint8)
        if not view.flags.writeable:
            raise ValueError("data must be a writable buffer")
        if view.size < byte_count:
            raise ValueError(f"data holds {view.size} bytes, need {byte_count}")
        return view[:byte_count]

    # --------------------------------------------------
    # Properties
    # --------------------------------------------------
    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def length(self) -> int:
        return self._length

    @property
    def element_size(self) -> int:
        return self._element_size

    @property
    def byte_count(self) -> int:
        return self._byte_count

    @property
    def address(self) -> Optional[np.ndarray]:
        return self._address

    @property
    def is_owner(self) -> bool:
        return self._is_owner

    @property
    def roi(self) -> ROI:
        return self._roi

    @property
    def image_size(self) -> Tuple[int, int]:
        return (self._width, self._height)

    @property
    def row_converter(self) -> RowConverter:
        return self._converter

    @property
    def pixels(self) -> np.ndarray:
        """
        Pixels as a (height, width) array in the native dtype.
        Writes through this view land in the buffer.
        """
        return self.memory().view(self.dtype).reshape(self._height, self._width)

    def memory(self) -> np.ndarray:
        """
        The raw byte block. Raises if the buffer has been disposed.
        """
        if self._address is None:
            raise ValueError(f"{self.__class__.__name__} has been disposed")
        return self._address

    # --------------------------------------------------
    # Ownership
    # --------------------------------------------------
    def release_ownership(self) -> Optional[np.ndarray]:
        """
        Stop owning the memory block and hand it to the caller.

        Returns the block if this buffer owned one, otherwise None. After
        this call dispose() no longer releases the block.
        """
        if self._address is None or not self._is_owner:
            return None
        self._is_owner = False
        return self._address

    def dispose(self) -> None:
        """
        Release owned memory. Borrowed memory is left untouched.
        Safe to call any number of times.
        """
        if self._is_owner and self._address is not None:
            self._address = None
            logger.debug(f"Released {self._byte_count} bytes of {self.__class__.__name__}")
        self._is_owner = False

    def __enter__(self) -> "ImageBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def __del__(self) -> None:
        if getattr(self, "_is_owner", False) and getattr(self, "_address", None) is not None:
            logger.warning(
                f"{self.__class__.__name__} {self._width}x{self._height} was garbage collected "
                f"while still owning {self._byte_count} bytes; call dispose()"
            )
            self.dispose()

    # --------------------------------------------------
    # Pixel-type hooks
    # --------------------------------------------------
    def create_row_converter(self) -> RowConverter:
        raise NotImplementedError(f"{self.__class__.__name__}.create_row_converter not implemented.")

    def encode_row(self, src: np.ndarray, dst: np.ndarray, width: int) -> None:
        """
        Convert `width` native pixels in src into export_format pixels in dst.
        """
        raise NotImplementedError(f"{self.__class__.__name__}.encode_row not implemented.")

    def init_palette(self, bitmap: PlatformImage) -> None:
        """Called on bitmaps created by to_bitmap() before pixels are written."""

    # --------------------------------------------------
    # Import
    # --------------------------------------------------
    @classmethod
    def from_bitmap(cls, bitmap: PlatformImage) -> "ImageBuffer":
        """
        Allocate a buffer the size of `bitmap` and import its pixels.
        """
        if bitmap is None:
            raise ValueError("bitmap is None")
        buffer = cls(bitmap.width, bitmap.height)
        try:
            BitmapBridge.import_bitmap(buffer, bitmap)
        except Exception:
            buffer.dispose()
            raise
        return buffer

    @classmethod
    def from_pillow(cls, image: "Image.Image") -> "ImageBuffer":
        """
        Import a Pillow Image. The image itself is not closed.
        """
        return cls.from_bitmap(PlatformImage(image))

    @classmethod
    def from_file(cls, file_path: Path) -> "ImageBuffer":
        with PlatformImage.open(file_path) as bitmap:
            return cls.from_bitmap(bitmap)

    # --------------------------------------------------
    # Export
    # --------------------------------------------------
    def to_bitmap(self) -> PlatformImage:
        """
        New bitmap in export_format holding a copy of this buffer.
        """
        return BitmapBridge.to_new_bitmap(self)

    def copy_to_bitmap(self, bitmap: PlatformImage) -> None:
        """
        Write this buffer into an existing bitmap of the same size and of
        exactly export_format.
        """
        BitmapBridge.export_bitmap(self, bitmap)

    def export_pillow(self) -> "Image.Image":
        return self.to_bitmap().pil

    def save(self, file_path: Path) -> Path:
        from filesystem.file_utils import FileUtils
        with self.to_bitmap() as bitmap:
            return FileUtils.save_image(bitmap.pil, file_path)

    # --------------------------------------------------
    # Misc
    # --------------------------------------------------
    def copy(self) -> "ImageBuffer":
        """
        Owning deep copy, same pixel type.
        """
        result = self.__class__(self._width, self._height)
        result.memory()[:] = self.memory()
        return result

    def apply_matrix(self, a: float, b: float, c: float, d: float, e: float, f: float) -> None:
        # TODO: affine resampling (needs a resampling kernel and an edge policy)
        raise NotImplementedError(f"{self.__class__.__name__}.apply_matrix not implemented.")

    def __repr__(self) -> str:
        owner = "owner" if self._is_owner else "borrowed"
        return f"{self.__class__.__name__}({self._width}x{self._height}, {owner})"
