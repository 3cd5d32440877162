"""Чтение и запись файлов ICO/CUR целиком.

Принципы:
- SRP: только структура контейнера (ICONDIR, ICONDIRENTRY, смещения данных);
  содержимое записей не декодируется, кроме «подглядывания» в размеры.
- Результат собирается локально и отдаётся только при успехе.
"""
from __future__ import annotations

import logging
import struct
from dataclasses import replace
from typing import BinaryIO, List, Optional, Tuple

from icokit.models.errors import InvalidUsageError, MalformedInputError
from icokit.models.icon_dir import IconDir, IconDirEntry
from icokit.models.resource_type import ResourceType
from icokit.services.entry_service import EntryService

logger = logging.getLogger(__name__)

MAX_ENTRIES = 0xFFFF

# reserved, resource type, entry count
_ICONDIR = struct.Struct("<HHH")
# width, height, num colors, reserved, planes/hotspot x, bpp/hotspot y, size, offset
_ICONDIRENTRY = struct.Struct("<BBBBHHII")


class IconDirService:
    def __init__(self, entry_service: Optional[EntryService] = None) -> None:
        self._entry_service = entry_service or EntryService()

    def read(self, stream: BinaryIO) -> IconDir:
        """Читает файл ICO или CUR из seekable-потока.

        Размеры записей уточняются по самим данным; ошибки в данных отдельной
        записи здесь игнорируются и всплывут только при её декодировании.

        Raises:
            MalformedInputError: неверные служебные поля или усечённый файл.
        """
        reserved, restype_number, num_entries = _ICONDIR.unpack(
            self._read_exact(stream, _ICONDIR.size, "ICONDIR")
        )
        if reserved != 0:
            raise MalformedInputError(
                f"Invalid reserved field value in ICONDIR (was {reserved}, but must be 0)"
            )
        resource_type = ResourceType.from_number(restype_number)
        if resource_type is None:
            raise MalformedInputError(f"Invalid resource type ({restype_number})")

        records: List[Tuple[int, int, int, int, int, int, int]] = []
        for _ in range(num_entries):
            (
                width_byte, height_byte, num_colors, reserved,
                color_planes, bits_per_pixel, data_size, data_offset,
            ) = _ICONDIRENTRY.unpack(self._read_exact(stream, _ICONDIRENTRY.size, "ICONDIRENTRY"))
            if reserved != 0:
                raise MalformedInputError(
                    f"Invalid reserved field value in ICONDIRENTRY (was {reserved}, but must be 0)"
                )
            # a size byte of zero means 256 or more; the payload has the real value
            width = width_byte or 256
            height = height_byte or 256
            records.append((width, height, num_colors, color_planes, bits_per_pixel, data_size, data_offset))

        entries = []
        for index, (width, height, num_colors, color_planes, bits_per_pixel, data_size, data_offset) in enumerate(records):
            stream.seek(data_offset)
            data = self._read_exact(stream, data_size, f"image data of entry {index}")
            entry = IconDirEntry(
                resource_type=resource_type,
                width=width,
                height=height,
                num_colors=num_colors,
                color_planes=color_planes,
                bits_per_pixel_field=bits_per_pixel,
                data=data,
            )
            entries.append(self._refine_size(entry, index))
        return IconDir(resource_type, entries)

    def write(self, icon_dir: IconDir, stream: BinaryIO) -> None:
        """Записывает каталог: заголовок, записи со смещениями, затем данные подряд."""
        entries = icon_dir.entries
        if len(entries) > MAX_ENTRIES:
            raise InvalidUsageError(
                f"Too many entries in IconDir (was {len(entries)}, but max is {MAX_ENTRIES})"
            )
        out = bytearray(_ICONDIR.pack(0, icon_dir.resource_type.number, len(entries)))
        data_offset = _ICONDIR.size + _ICONDIRENTRY.size * len(entries)
        for entry in entries:
            out += _ICONDIRENTRY.pack(
                0 if entry.width > 255 else entry.width,
                0 if entry.height > 255 else entry.height,
                entry.num_colors,
                0,  # reserved
                entry.color_planes,
                entry.bits_per_pixel_field,
                len(entry.data),
                data_offset,
            )
            data_offset += len(entry.data)
        for entry in entries:
            out += entry.data
        stream.write(bytes(out))

    # ---- Helpers ----
    def _refine_size(self, entry: IconDirEntry, index: int) -> IconDirEntry:
        try:
            width, height = self._entry_service.decode_size(entry)
        except MalformedInputError as exc:
            logger.debug("Keeping directory size for entry %d: %s", index, exc)
            return entry
        if (width, height) == (entry.width, entry.height):
            return entry
        return replace(entry, width=width, height=height)

    def _read_exact(self, stream: BinaryIO, size: int, what: str) -> bytes:
        data = stream.read(size)
        if len(data) != size:
            raise MalformedInputError(
                f"Unexpected end of file while reading {what} "
                f"(wanted {size} bytes, got {len(data)})"
            )
        return data
