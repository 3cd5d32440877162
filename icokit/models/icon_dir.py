"""Модели каталога ICO/CUR: запись каталога и сам каталог.

Принципы:
- SRP: только данные и их инварианты; чтение/запись и кодеки живут в `services`.
- Запись каталога неизменяема (`frozen=True`): байты полезной нагрузки
  принадлежат ей одной и после загрузки не меняются.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from icokit.models.errors import InvalidUsageError
from icokit.models.resource_type import ResourceType

# The signature that all PNG files start with.
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# entry field -> largest value its directory record can hold
_FIELD_LIMITS = (
    ("num_colors", 0xFF),
    ("color_planes", 0xFFFF),
    ("bits_per_pixel_field", 0xFFFF),
)


@dataclass(frozen=True)
class IconDirEntry:
    """Одна запись каталога: одна иконка или один курсор.

    Fields:
        resource_type: Тип ресурса, совпадает с типом каталога.
        width: Ширина, px (уточняется по самим данным при чтении).
        height: Высота, px.
        num_colors: Размер палитры (0 для 256 и больше или без палитры).
        color_planes: Для иконок число плоскостей, для курсоров hotspot x.
        bits_per_pixel_field: Для иконок bpp, для курсоров hotspot y.
        data: Закодированные байты BMP или PNG.
    """
    resource_type: ResourceType
    width: int
    height: int
    num_colors: int
    color_planes: int
    bits_per_pixel_field: int
    data: bytes

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if value < 1:
                raise InvalidUsageError(f"Invalid entry {name} (was {value}, but must be at least 1)")
        for name, limit in _FIELD_LIMITS:
            value = getattr(self, name)
            if not 0 <= value <= limit:
                raise InvalidUsageError(
                    f"Invalid entry {name} (was {value}, but must be in 0..{limit})"
                )


    @property
    def bits_per_pixel(self) -> int:
        """Глубина цвета; для курсоров всегда 0 (поле занято hotspot y)."""
        if self.resource_type is ResourceType.CURSOR:
            return 0
        return self.bits_per_pixel_field

    @property
    def cursor_hotspot(self) -> Optional[Tuple[int, int]]:
        if self.resource_type is ResourceType.CURSOR:
            return (self.color_planes, self.bits_per_pixel_field)
        return None

    @property
    def is_png(self) -> bool:
        """True, если данные закодированы PNG, иначе это BMP."""
        return self.data.startswith(PNG_SIGNATURE)


class IconDir:
    """Содержимое одного файла ICO или CUR: упорядоченный набор записей одного типа."""

    def __init__(self, resource_type: ResourceType, entries: Iterable[IconDirEntry] = ()) -> None:
        self._resource_type = resource_type
        self._entries: List[IconDirEntry] = []
        for entry in entries:
            self.add_entry(entry)

    @property
    def resource_type(self) -> ResourceType:
        return self._resource_type

    @property
    def entries(self) -> Tuple[IconDirEntry, ...]:
        return tuple(self._entries)

    def add_entry(self, entry: IconDirEntry) -> None:
        """Добавляет запись; тип ресурса записи обязан совпадать с типом каталога."""
        if entry.resource_type is not self._resource_type:
            raise InvalidUsageError(
                f"Can't add {entry.resource_type} entry to {self._resource_type} directory"
            )
        self._entries.append(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"IconDir(resource_type={self._resource_type!r}, entries={len(self._entries)})"
