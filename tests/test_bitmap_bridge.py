"""Import and export between ImageBuffer variants and platform bitmaps.

Covers:
    - 24bpp RGB and 32bpp ARGB round trips (including padded strides)
    - CMYK render-to-RGB normalization and ARGB clone normalization
    - Export validation leaves the target untouched
    - Locks are released and temporaries disposed when a row copy fails

Run:
    pytest tests/test_bitmap_bridge.py -v
"""

import numpy as np
import pytest
from PIL import Image

from image.bitmap_bridge import BitmapBridge
from image.image_argb32 import ImageArgb32
from image.image_buffer import ImageBuffer
from image.image_rgb24 import ImageRgb24
from image.image_u8 import ImageU8
from image.pixel_format import PixelFormat
from image.platform_image import PlatformImage
from image.row_converter import Rgb24RowConverter

from conftest import make_image


def assert_same_pixels(a, b):
    assert a.size == b.size
    assert a.mode == b.mode
    for y in range(a.height):
        for x in range(a.width):
            assert a.getpixel((x, y)) == b.getpixel((x, y)), f"pixel ({x}, {y})"


def test_2x2_rgb_scenario(rgb_2x2):
    with ImageRgb24.from_pillow(rgb_2x2) as buffer:
        assert buffer.length == 4
        assert buffer.byte_count == 12
        assert buffer.pixels[0, 0].item() == (0, 0, 255)
        assert buffer.pixels[1, 0].item() == (255, 0, 0)

        with buffer.to_bitmap() as bitmap:
            assert bitmap.pixel_format is PixelFormat.FORMAT_24BPP_RGB
            assert bitmap.pixel(0, 0) == (255, 0, 0)
            assert bitmap.pixel(1, 0) == (0, 255, 0)
            assert bitmap.pixel(0, 1) == (0, 0, 255)
            assert bitmap.pixel(1, 1) == (255, 255, 255)


def test_rgb24_round_trip_with_padded_stride(rgb_odd):
    with ImageRgb24.from_pillow(rgb_odd) as buffer:
        with buffer.to_bitmap() as bitmap:
            assert_same_pixels(bitmap.pil, rgb_odd)


def test_argb32_round_trip(rgba_odd):
    with ImageArgb32.from_pillow(rgba_odd) as buffer:
        assert buffer.byte_count == 3 * 4 * 4
        with buffer.to_bitmap() as bitmap:
            assert bitmap.pixel_format is PixelFormat.FORMAT_32BPP_ARGB
            assert_same_pixels(bitmap.pil, rgba_odd)


def test_argb32_from_rgb_is_opaque(rgb_2x2):
    with ImageArgb32.from_pillow(rgb_2x2) as buffer:
        assert (buffer.pixels["alpha"] == 255).all()
        assert buffer.pixels[1, 1].item() == (255, 255, 255, 255)


def test_rgb24_from_rgba_drops_alpha(rgba_odd):
    with ImageRgb24.from_pillow(rgba_odd) as buffer:
        with buffer.to_bitmap() as bitmap:
            assert_same_pixels(bitmap.pil, rgba_odd.convert("RGB"))


def test_cmyk_normalization_is_transparent(cmyk_image):
    rendered = Image.new("RGB", cmyk_image.size)
    rendered.paste(cmyk_image, (0, 0))

    with ImageRgb24.from_pillow(cmyk_image) as via_cmyk, ImageRgb24.from_pillow(rendered) as direct:
        assert np.array_equal(via_cmyk.address, direct.address)


def test_cmyk_goes_through_rgb_canvas(cmyk_image, monkeypatch):
    created = []
    original_new = PlatformImage.new.__func__

    def spy_new(cls, width, height, pixel_format=PixelFormat.FORMAT_32BPP_ARGB):
        bitmap = original_new(cls, width, height, pixel_format)
        created.append(bitmap)
        return bitmap

    monkeypatch.setattr(PlatformImage, "new", classmethod(spy_new))
    ImageRgb24.from_pillow(cmyk_image).dispose()

    assert len(created) == 1
    assert created[0].pil.mode == "RGB"


@pytest.mark.parametrize("mode", ["L", "P", "LA"])
def test_other_formats_cloned_to_argb(mode, rgba_odd):
    source = rgba_odd.convert(mode)
    with ImageArgb32.from_pillow(source) as buffer:
        with buffer.to_bitmap() as bitmap:
            assert_same_pixels(bitmap.pil, source.convert("RGBA"))


def test_normalize_returns_direct_formats_unchanged(rgb_2x2):
    bitmap = PlatformImage(rgb_2x2)
    assert BitmapBridge.normalize(bitmap) is bitmap


def test_source_bitmap_is_not_modified_or_closed(rgb_odd):
    before = rgb_odd.tobytes()
    ImageRgb24.from_pillow(rgb_odd).dispose()
    assert rgb_odd.tobytes() == before


def test_from_bitmap_none_rejected():
    with pytest.raises(ValueError):
        ImageRgb24.from_bitmap(None)


def test_import_size_mismatch_rejected(rgb_2x2):
    with ImageRgb24(3, 3) as buffer:
        with pytest.raises(ValueError):
            BitmapBridge.import_bitmap(buffer, PlatformImage(rgb_2x2))


def test_import_into_wrapped_memory(rgb_2x2):
    memory = bytearray(12)
    buffer = ImageRgb24.wrap(2, 2, memory)
    BitmapBridge.import_bitmap(buffer, PlatformImage(rgb_2x2))
    assert memory == bytearray([0, 0, 255, 0, 255, 0, 255, 0, 0, 255, 255, 255])


def test_import_failure_unlocks_and_propagates(rgb_odd, monkeypatch):
    def broken(self, src, dst, width):
        raise ArithmeticError("row copy failed")

    disposed = []
    original_dispose = ImageBuffer.dispose

    def spy_dispose(self):
        original_dispose(self)
        disposed.append(self)

    monkeypatch.setattr(ImageBuffer, "dispose", spy_dispose)
    monkeypatch.setattr(Rgb24RowConverter, "copy_rgb24", broken)
    bitmap = PlatformImage(rgb_odd)
    with pytest.raises(ArithmeticError, match="row copy failed"):
        ImageRgb24.from_bitmap(bitmap)
    assert not bitmap.is_locked
    assert len(disposed) == 1
    assert disposed[0].address is None
    assert not disposed[0].is_owner


def test_import_failure_disposes_temporary_canvas(cmyk_image, monkeypatch):
    disposed = []
    original_dispose = PlatformImage.dispose

    def spy_dispose(self):
        disposed.append(self)
        original_dispose(self)

    def broken(self, src, dst, width):
        raise ArithmeticError("row copy failed")

    monkeypatch.setattr(PlatformImage, "dispose", spy_dispose)
    monkeypatch.setattr(Rgb24RowConverter, "copy_rgb24", broken)
    source = PlatformImage(cmyk_image)
    with pytest.raises(ArithmeticError):
        ImageRgb24.from_bitmap(source)

    assert len(disposed) == 1
    assert disposed[0] is not source
    assert not disposed[0].is_locked


def test_export_failure_unlocks_and_leaves_target_untouched(rgb_2x2, monkeypatch):
    def broken(self, src, dst, width):
        raise ArithmeticError("row encode failed")

    target = PlatformImage(Image.new("RGB", (2, 2), (9, 8, 7)))
    before = target.pil.tobytes()
    with ImageRgb24.from_pillow(rgb_2x2) as buffer:
        monkeypatch.setattr(ImageRgb24, "encode_row", broken)
        with pytest.raises(ArithmeticError, match="row encode failed"):
            buffer.copy_to_bitmap(target)

    assert not target.is_locked
    assert target.pil.tobytes() == before


def test_to_bitmap_failure_disposes_new_bitmap(rgb_2x2, monkeypatch):
    disposed = []
    original_dispose = PlatformImage.dispose

    def spy_dispose(self):
        disposed.append(self)
        original_dispose(self)

    def broken(self, src, dst, width):
        raise ArithmeticError("row encode failed")

    with ImageRgb24.from_pillow(rgb_2x2) as buffer:
        monkeypatch.setattr(PlatformImage, "dispose", spy_dispose)
        monkeypatch.setattr(ImageRgb24, "encode_row", broken)
        with pytest.raises(ArithmeticError, match="row encode failed"):
            buffer.to_bitmap()

    assert len(disposed) == 1
    assert disposed[0].pixel_format is PixelFormat.FORMAT_24BPP_RGB
    assert not disposed[0].is_locked


def test_export_into_existing_bitmap(rgba_odd):
    with ImageArgb32.from_pillow(rgba_odd) as buffer:
        target = PlatformImage.new(3, 4, PixelFormat.FORMAT_32BPP_ARGB)
        buffer.copy_to_bitmap(target)
        assert_same_pixels(target.pil, rgba_odd)


@pytest.mark.parametrize("size", [(3, 2), (2, 3), (1, 1)])
def test_export_size_mismatch_leaves_target_untouched(rgb_2x2, size):
    target = PlatformImage(Image.new("RGB", size, (9, 8, 7)))
    before = target.pil.tobytes()
    with ImageRgb24.from_pillow(rgb_2x2) as buffer:
        with pytest.raises(ValueError):
            buffer.copy_to_bitmap(target)
    assert target.pil.tobytes() == before


@pytest.mark.parametrize("mode", ["RGBA", "P", "L", "CMYK"])
def test_export_format_mismatch_leaves_target_untouched(rgb_2x2, mode):
    target = PlatformImage(Image.new(mode, (2, 2)))
    before = target.pil.tobytes()
    with ImageRgb24.from_pillow(rgb_2x2) as buffer:
        with pytest.raises(ValueError):
            buffer.copy_to_bitmap(target)
    assert target.pil.tobytes() == before


def test_export_none_rejected():
    with ImageRgb24(1, 1) as buffer:
        with pytest.raises(ValueError):
            buffer.copy_to_bitmap(None)


def test_export_from_disposed_buffer_rejected():
    buffer = ImageRgb24(1, 1)
    buffer.dispose()
    with pytest.raises(ValueError):
        buffer.to_bitmap()


def test_u8_import_and_indexed_export(rgb_2x2):
    with ImageU8.from_pillow(rgb_2x2) as buffer:
        assert buffer.byte_count == 4
        assert buffer.pixels.tolist() == [[76, 149], [29, 255]]

        with buffer.to_bitmap() as bitmap:
            assert bitmap.pixel_format is PixelFormat.FORMAT_8BPP_INDEXED
            assert bitmap.pixel(1, 0) == 149
            gray = bitmap.pil.convert("RGB")
            assert gray.getpixel((0, 0)) == (76, 76, 76)
            assert gray.getpixel((1, 1)) == (255, 255, 255)


def test_u8_round_trip_through_indexed_bitmap():
    gray = make_image("L", [[x * 40 + y for x in range(5)] for y in range(3)])
    with ImageU8.from_pillow(gray.convert("RGB")) as buffer:
        with buffer.to_bitmap() as bitmap:
            assert_same_pixels(bitmap.pil.convert("L"), gray)
