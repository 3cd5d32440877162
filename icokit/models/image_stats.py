"""Статистика растра, по которой выбирается способ кодирования."""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

Rgb = Tuple[int, int, int]


@dataclass(frozen=True)
class ImageStats:
    """Результат одного прохода по пикселям.

    Fields:
        has_alpha: Есть хотя бы один пиксель с альфой != 255.
        has_nonbinary_alpha: Есть альфа строго между 0 и 255.
        colors: Не более 256 различных (R, G, B) или None, если цветов больше.
    """
    has_alpha: bool
    has_nonbinary_alpha: bool
    colors: Optional[FrozenSet[Rgb]]
