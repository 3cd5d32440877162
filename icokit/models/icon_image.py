"""Модель декодированного растра иконки/курсора.

Принципы:
- SRP: только структура данных и проверка инвариантов, без кодирования.
- Пиксели хранятся неизменяемым `bytes`: RGBA, по 4 байта, строки сверху вниз.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from icokit.models.errors import InvalidUsageError

MIN_WIDTH = 1
MIN_HEIGHT = 1
MAX_HOTSPOT_COORD = 0xFFFF


def _check_hotspot(hotspot: Optional[Tuple[int, int]]) -> Optional[Tuple[int, int]]:
    """Приводит hotspot к паре (x, y) из u16 или бросает `InvalidUsageError`."""
    if hotspot is None:
        return None
    x, y = hotspot
    for name, value in (("x", x), ("y", y)):
        if not 0 <= value <= MAX_HOTSPOT_COORD:
            raise InvalidUsageError(
                f"Invalid hotspot {name} (was {value}, but must be in 0..{MAX_HOTSPOT_COORD})"
            )
    return int(x), int(y)


@dataclass
class IconImage:
    """Растр RGBA с необязательной «горячей точкой» курсора.

    Fields:
        width: Ширина, px (>= 1).
        height: Высота, px (>= 1).
        rgba_data: Ровно 4 * width * height байт.
        hotspot: (x, y) от левого верхнего угла (0..65535) или None для иконки.
    """
    width: int
    height: int
    rgba_data: bytes
    hotspot: Optional[Tuple[int, int]] = field(default=None)

    def __setattr__(self, name: str, value) -> None:
        if name == "hotspot":
            value = _check_hotspot(value)
        super().__setattr__(name, value)

    def __post_init__(self) -> None:
        if self.width < MIN_WIDTH:
            raise InvalidUsageError(
                f"Invalid width (was {self.width}, but must be at least {MIN_WIDTH})"
            )
        if self.height < MIN_HEIGHT:
            raise InvalidUsageError(
                f"Invalid height (was {self.height}, but must be at least {MIN_HEIGHT})"
            )
        self.rgba_data = bytes(self.rgba_data)
        expected = 4 * self.width * self.height
        if len(self.rgba_data) != expected:
            raise InvalidUsageError(
                f"Invalid data length (was {len(self.rgba_data)}, but must be "
                f"{expected} for {self.width}x{self.height} image)"
            )

    @classmethod
    def from_rgba_data(cls, width: int, height: int, rgba_data: bytes) -> "IconImage":
        """Создаёт растр из готовых RGBA-байт; при несоответствии размеров бросает `InvalidUsageError`."""
        return cls(width=width, height=height, rgba_data=rgba_data)

    @property
    def num_pixels(self) -> int:
        return self.width * self.height
