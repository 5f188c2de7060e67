# file_utils.py

from __future__ import annotations

from pathlib import Path

from PIL import Image


class FileUtils:

    # ================================================================
    # PATH UTILITIES
    # ================================================================

    @classmethod
    def _ensure_parent_dir(cls, path: Path) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    # ================================================================
    # IMAGE UTILITIES
    # ================================================================

    @classmethod
    def load_image(cls, file_path: Path) -> Image.Image:
        """
        Open and fully decode an image.

        If file_path does not exist, the same name is tried with the common
        image extensions. Decoder errors are not caught.
        """
        path = Path(file_path).resolve()
        if path.is_file():
            return cls._open_loaded(path)
        base = path.with_suffix("")
        for extension in [".png", ".PNG", ".bmp", ".BMP", ".jpg", ".JPG", ".jpeg", ".JPEG", ".tif", ".tiff"]:
            attempt_path = base.with_suffix(extension)
            if attempt_path.is_file():
                return cls._open_loaded(attempt_path)
        raise FileNotFoundError(f"Image not found: {path}")

    @classmethod
    def _open_loaded(cls, path: Path) -> Image.Image:
        with Image.open(path) as image:
            image.load()
            return image.copy()

    @classmethod
    def save_image(cls, image: Image.Image, file_path: Path) -> Path:
        path = Path(file_path).resolve()
        cls._ensure_parent_dir(path)
        image.save(path)
        return path
