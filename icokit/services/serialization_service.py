"""Структурная (де)сериализация модели каталога для передачи и хранения.

Принципы:
- SRP: только форма данных (dict/JSON), без логики форматов ICO/BMP/PNG.
- Данные записи передаются как base64, все служебные поля записи сохраняются.
"""
from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Dict

from icokit.models.errors import InvalidUsageError, MalformedInputError
from icokit.models.icon_dir import IconDir, IconDirEntry
from icokit.models.resource_type import ResourceType

_ENTRY_FIELDS = ("width", "height", "num_colors", "color_planes", "bits_per_pixel_field")


class SerializationService:
    def to_dict(self, icon_dir: IconDir) -> Dict[str, Any]:
        return {
            "resource_type": icon_dir.resource_type.name,
            "entries": [self.entry_to_dict(entry) for entry in icon_dir.entries],
        }

    def entry_to_dict(self, entry: IconDirEntry) -> Dict[str, Any]:
        record: Dict[str, Any] = {"resource_type": entry.resource_type.name}
        for name in _ENTRY_FIELDS:
            record[name] = getattr(entry, name)
        record["data"] = base64.b64encode(entry.data).decode("ascii")
        return record

    def from_dict(self, record: Dict[str, Any]) -> IconDir:
        """Восстанавливает `IconDir` из словаря, созданного `to_dict`.

        Raises:
            MalformedInputError: словарь не соответствует ожидаемой форме.
        """
        try:
            resource_type = self._resource_type(record["resource_type"])
            entries = [self.entry_from_dict(item) for item in record["entries"]]
        except (KeyError, TypeError) as exc:
            raise MalformedInputError(f"Invalid IconDir record: {exc!r}") from exc
        for entry in entries:
            if entry.resource_type is not resource_type:
                raise MalformedInputError(
                    f"Entry type {entry.resource_type} does not match directory type {resource_type}"
                )
        return IconDir(resource_type, entries)

    def entry_from_dict(self, record: Dict[str, Any]) -> IconDirEntry:
        try:
            values = {name: int(record[name]) for name in _ENTRY_FIELDS}
            data = base64.b64decode(record["data"], validate=True)
            resource_type = self._resource_type(record["resource_type"])
        except (KeyError, TypeError, ValueError, binascii.Error) as exc:
            raise MalformedInputError(f"Invalid IconDirEntry record: {exc!r}") from exc
        try:
            return IconDirEntry(resource_type=resource_type, data=data, **values)
        except InvalidUsageError as exc:
            raise MalformedInputError(f"Invalid IconDirEntry record: {exc}") from exc

    def to_json(self, icon_dir: IconDir) -> str:
        return json.dumps(self.to_dict(icon_dir))

    def from_json(self, text: str) -> IconDir:
        try:
            record = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedInputError(f"Invalid JSON: {exc}") from exc
        return self.from_dict(record)

    def _resource_type(self, name: str) -> ResourceType:
        try:
            return ResourceType[name]
        except KeyError as exc:
            raise MalformedInputError(f"Unknown resource type: {name!r}") from exc
