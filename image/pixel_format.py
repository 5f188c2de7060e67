# pixel_format.py

from __future__ import annotations
from enum import Enum
from typing import Dict, Optional


class PixelFormat(Enum):
    """
    Row layouts a PlatformImage can hand out through lock_bits().

    Each member carries:
        - mode:           the Pillow image mode holding this layout
        - rawmode:        the Pillow raw packer/unpacker that produces the
                          platform byte order inside a locked row
        - bits_per_pixel: size of one pixel inside a locked row
    """

    FORMAT_1BPP_INDEXED = ("1", "1", 1)
    FORMAT_8BPP_INDEXED = ("P", "P", 8)
    FORMAT_8BPP_GRAYSCALE = ("L", "L", 8)
    FORMAT_16BPP_GRAYSCALE = ("I;16", "I;16", 16)
    FORMAT_24BPP_RGB = ("RGB", "BGR", 24)
    FORMAT_32BPP_ARGB = ("RGBA", "BGRA", 32)
    FORMAT_32BPP_CMYK = ("CMYK", "CMYK", 32)
    UNDEFINED = (None, None, 0)

    def __init__(self, mode: Optional[str], rawmode: Optional[str], bits_per_pixel: int) -> None:
        self.mode = mode
        self.rawmode = rawmode
        self.bits_per_pixel = bits_per_pixel

    @property
    def is_defined(self) -> bool:
        return self.mode is not None

    def stride_for(self, width: int) -> int:
        """Bytes per locked row, padded up to a 4-byte boundary."""
        return ((int(width) * self.bits_per_pixel + 31) // 32) * 4

    def packed_row_bytes(self, width: int) -> int:
        """Bytes per row without padding."""
        return (int(width) * self.bits_per_pixel + 7) // 8

    @classmethod
    def from_mode(cls, mode: str) -> "PixelFormat":
        return _MODE_TABLE.get(mode, cls.UNDEFINED)


_MODE_TABLE: Dict[str, PixelFormat] = {
    fmt.mode: fmt for fmt in PixelFormat if fmt.mode is not None
}
