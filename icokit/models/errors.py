"""Ошибки кодека ICO/CUR.

Два вида:
- `MalformedInputError`: входные байты нарушают формат (недоверенные данные).
- `InvalidUsageError`: нарушение контракта вызывающим кодом.
"""
from __future__ import annotations


class IcoError(Exception):
    """Базовый класс всех ошибок пакета."""


class MalformedInputError(IcoError, ValueError):
    """Данные ICO/CUR, BMP или PNG повреждены или не поддерживаются."""


class InvalidUsageError(IcoError, ValueError):
    """API вызван с нарушением контракта (размеры, тип ресурса, число записей)."""
