# bitmap_bridge.py

from __future__ import annotations
import logging
from typing import TYPE_CHECKING

from image.lock_mode import LockMode
from image.pixel_format import PixelFormat
from image.pixel_representations import foreign_dtype, row_view
from image.platform_image import PlatformImage

if TYPE_CHECKING:
    from image.image_buffer import ImageBuffer

logger = logging.getLogger(__name__)


class BitmapBridge:
    """
    Moves pixels between an ImageBuffer and a PlatformImage, one row at a time.

    Import normalizes the source into a layout a RowConverter can read.
    Export never normalizes: the target must already be in the buffer's
    export_format.
    """

    # Layouts a RowConverter reads directly.
    DIRECT_FORMATS = frozenset({
        PixelFormat.FORMAT_24BPP_RGB,
        PixelFormat.FORMAT_32BPP_ARGB,
    })

    # Layouts rendered onto a 24bpp RGB canvas before import.
    RENDER_TO_RGB_FORMATS = frozenset({
        PixelFormat.FORMAT_32BPP_CMYK,
    })

    # --------------------------------------------------
    # Import
    # --------------------------------------------------
    @classmethod
    def normalize(cls, bitmap: PlatformImage) -> PlatformImage:
        """
        Return `bitmap` itself when its rows can be read directly, otherwise
        a temporary copy the caller must dispose.
        """
        pixel_format = bitmap.pixel_format
        if pixel_format in cls.DIRECT_FORMATS:
            return bitmap

        if pixel_format in cls.RENDER_TO_RGB_FORMATS:
            logger.debug(f"Rendering {pixel_format.name} bitmap onto a 24bpp RGB canvas")
            canvas = PlatformImage.new(bitmap.width, bitmap.height, PixelFormat.FORMAT_24BPP_RGB)
            try:
                canvas.draw_image(bitmap)
            except Exception:
                canvas.dispose()
                raise
            return canvas

        logger.debug(f"Cloning mode {bitmap.pil.mode!r} bitmap into 32bpp ARGB")
        return bitmap.clone(PixelFormat.FORMAT_32BPP_ARGB)

    @classmethod
    def import_bitmap(cls, buffer: "ImageBuffer", bitmap: PlatformImage) -> None:
        """
        Overwrite every pixel of `buffer` with the pixels of `bitmap`.

        On failure the buffer contents are undefined and the error is
        re-raised unchanged.
        """
        if bitmap is None:
            raise ValueError("bitmap is None")
        if bitmap.size != buffer.image_size:
            raise ValueError(
                f"Size mismatch: bitmap is {bitmap.width}x{bitmap.height}, "
                f"buffer is {buffer.width}x{buffer.height}"
            )

        width = buffer.width
        height = buffer.height
        step = buffer.element_size * width
        dst = buffer.memory()

        source = cls.normalize(bitmap)
        try:
            copy_row = buffer.row_converter.copier_for(source.pixel_format)
            src_dtype = foreign_dtype(source.pixel_format)
            with source.lock_bits(LockMode.READ_ONLY) as data:
                for y in range(height):
                    src_line = row_view(data.scan0, data.row_offset(y), width, src_dtype)
                    dst_line = dst[y * step:(y + 1) * step].view(buffer.dtype)
                    copy_row(src_line, dst_line, width)
        finally:
            if source is not bitmap:
                source.dispose()

    # --------------------------------------------------
    # Export
    # --------------------------------------------------
    @classmethod
    def to_new_bitmap(cls, buffer: "ImageBuffer") -> PlatformImage:
        bitmap = PlatformImage.new(buffer.width, buffer.height, buffer.export_format)
        try:
            buffer.init_palette(bitmap)
            cls.export_bitmap(buffer, bitmap)
        except Exception:
            bitmap.dispose()
            raise
        return bitmap

    @classmethod
    def export_bitmap(cls, buffer: "ImageBuffer", bitmap: PlatformImage) -> None:
        """
        Write every pixel of `buffer` into `bitmap`.

        The bitmap is validated before it is touched: it must match the
        buffer's size and be exactly in the buffer's export_format.
        """
        if bitmap is None:
            raise ValueError("bitmap is None")
        if bitmap.size != buffer.image_size:
            raise ValueError(
                f"Size mismatch: bitmap is {bitmap.width}x{bitmap.height}, "
                f"buffer is {buffer.width}x{buffer.height}"
            )
        if bitmap.pixel_format is not buffer.export_format:
            raise ValueError(
                f"Only {buffer.export_format.name} bitmaps are supported, got {bitmap.pixel_format.name}"
            )

        width = buffer.width
        height = buffer.height
        step = buffer.element_size * width
        src = buffer.memory()
        dst_dtype = foreign_dtype(buffer.export_format)

        with bitmap.lock_bits(LockMode.READ_WRITE) as data:
            for y in range(height):
                src_line = src[y * step:(y + 1) * step].view(buffer.dtype)
                dst_line = row_view(data.scan0, data.row_offset(y), width, dst_dtype)
                buffer.encode_row(src_line, dst_line, width)
