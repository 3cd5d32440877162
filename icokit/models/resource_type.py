"""Тип ресурса, хранимого в файле: иконка (ICO) или курсор (CUR)."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ResourceType(Enum):
    ICON = 1
    CURSOR = 2

    @classmethod
    def from_number(cls, number: int) -> Optional["ResourceType"]:
        """Возвращает тип по коду из заголовка ICONDIR или None для неизвестного кода."""
        for restype in cls:
            if restype.value == number:
                return restype
        return None

    @property
    def number(self) -> int:
        return self.value

    def __str__(self) -> str:
        return "Icon" if self is ResourceType.ICON else "Cursor"
