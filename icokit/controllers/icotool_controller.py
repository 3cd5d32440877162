"""Контроллер утилиты icotool: оркестрация файлов и сервисов.

SOLID:
- SRP: класс связывает пути на диске с сервисами (без логики форматов).
- DIP: зависит от сервисов как от ролей; конкретные реализации инкапсулированы.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from icokit.models.errors import InvalidUsageError
from icokit.models.icon_dir import IconDir, IconDirEntry
from icokit.models.icon_image import IconImage
from icokit.models.resource_type import ResourceType
from icokit.services.entry_service import EntryService
from icokit.services.icon_dir_service import IconDirService
from icokit.services.image_service import ImageService
from icokit.services.png_service import PngService

logger = logging.getLogger(__name__)

FORMATS = ("auto", "bmp", "png")


@dataclass
class IcotoolController:
    """Команды утилиты: list, extract, create.

    Ответственности:
    - Открытие/создание файлов.
    - Чтение и запись каталогов через `IconDirService`.
    - Кодирование растров через `EntryService` в выбранном подформате.
    """
    _image_service: ImageService = field(default_factory=ImageService)
    _png_service: PngService = field(default_factory=PngService)
    _entry_service: EntryService = field(default_factory=EntryService)
    _icon_dir_service: IconDirService = field(default_factory=IconDirService)

    def load(self, path: str | Path) -> IconDir:
        with open(path, "rb") as stream:
            return self._icon_dir_service.read(stream)

    def list_entries(self, path: str | Path) -> List[str]:
        """Возвращает строки описания файла: заголовок и по строке на запись."""
        icon_dir = self.load(path)
        lines = [f"There are {len(icon_dir)} {icon_dir.resource_type} entries"]
        for entry in icon_dir.entries:
            lines.append(self._describe(entry))
        return lines

    def extract(self, path: str | Path, index: int, out_path: str | Path) -> None:
        """Декодирует запись с номером `index` и сохраняет её как PNG."""
        icon_dir = self.load(path)
        entries = icon_dir.entries
        if not 0 <= index < len(entries):
            raise InvalidUsageError(
                f"Номер записи {index} вне диапазона (в {path} записей: {len(entries)})"
            )
        image = self._entry_service.decode(entries[index])
        with open(out_path, "wb") as stream:
            self._png_service.write_png(image, stream)
        logger.info("Extracted entry %d (%dx%d) to %s", index, image.width, image.height, out_path)

    def create(
        self,
        out_path: str | Path,
        image_paths: Iterable[str | Path],
        cursor: bool = False,
        hotspot: Optional[Tuple[int, int]] = None,
        fmt: str = "auto",
    ) -> IconDir:
        """Собирает ICO (или CUR при `cursor`) из файлов изображений и записывает его."""
        if fmt not in FORMATS:
            raise InvalidUsageError(f"Неизвестный формат {fmt!r} (ожидается один из: {', '.join(FORMATS)})")
        if hotspot is not None:
            cursor = True
        resource_type = ResourceType.CURSOR if cursor else ResourceType.ICON
        icon_dir = IconDir(resource_type)
        for image_path in image_paths:
            image = self._image_service.load_image(image_path)
            if cursor:
                image.hotspot = hotspot or (0, 0)
            icon_dir.add_entry(self._encode(image, fmt))
        with open(out_path, "wb") as stream:
            self._icon_dir_service.write(icon_dir, stream)
        return icon_dir

    # ---- Helpers ----
    def _encode(self, image: IconImage, fmt: str) -> IconDirEntry:
        if fmt == "bmp":
            return self._entry_service.encode_as_bmp(image)
        if fmt == "png":
            return self._entry_service.encode_as_png(image)
        return self._entry_service.encode(image)

    def _describe(self, entry: IconDirEntry) -> str:
        kind = "png" if entry.is_png else "bmp"
        hotspot = entry.cursor_hotspot
        if hotspot is not None:
            detail = f"hotspot {hotspot[0]},{hotspot[1]}"
        else:
            detail = f"{entry.bits_per_pixel} bpp"
        return f"{entry.width}x{entry.height} {kind} {detail}"
