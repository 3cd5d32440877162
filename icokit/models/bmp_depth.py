"""Глубины цвета BMP-подформата."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class BmpDepth(Enum):
    ONE = 1
    FOUR = 4
    EIGHT = 8
    SIXTEEN = 16  # decode only
    TWENTY_FOUR = 24
    THIRTY_TWO = 32

    @classmethod
    def from_bits_per_pixel(cls, bits_per_pixel: int) -> Optional["BmpDepth"]:
        for depth in cls:
            if depth.value == bits_per_pixel:
                return depth
        return None

    @property
    def bits_per_pixel(self) -> int:
        return self.value

    @property
    def num_colors(self) -> int:
        """Размер таблицы цветов (0 для глубин без палитры)."""
        if self is BmpDepth.ONE:
            return 2
        if self is BmpDepth.FOUR:
            return 16
        if self is BmpDepth.EIGHT:
            return 256
        return 0
