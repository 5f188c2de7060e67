# roi.py

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class ROI:
    """
    Region of interest carried by every ImageBuffer.
    Not used by any operation yet; an empty ROI means "whole image".
    """

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0
