"""Загрузка растров с диска и анализ пикселей перед кодированием.

Принципы:
- SRP: класс отвечает только за получение `IconImage` и расчёт `ImageStats`.
- OCP: новые источники (стрим, URL) можно добавить отдельными методами.
"""
from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from icokit.models.errors import MalformedInputError
from icokit.models.icon_image import IconImage
from icokit.models.image_stats import ImageStats

MAX_PALETTE_COLORS = 256


def rgba_array(image: IconImage) -> np.ndarray:
    """Представление пикселей как массива uint8 формы (height, width, 4) без копирования."""
    return np.frombuffer(image.rgba_data, dtype=np.uint8).reshape(image.height, image.width, 4)


def pack_rgb(rgb: np.ndarray) -> np.ndarray:
    """Упаковывает (..., 3) RGB в целые ключи 0xRRGGBB."""
    rgb = rgb.astype(np.uint32)
    return (rgb[..., 0] << 16) | (rgb[..., 1] << 8) | rgb[..., 2]


class ImageService:
    def load_image(self, file_path: str | Path) -> IconImage:
        """Загружает изображение с диска и возвращает его как RGBA-растр.

        Args:
            file_path: Путь до файла изображения (любой формат, понятный Pillow).

        Returns:
            `IconImage` без hotspot.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            MalformedInputError: если файл не распознан как изображение.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        try:
            with Image.open(path) as pil_image:
                rgba = pil_image.convert("RGBA")
        except UnidentifiedImageError as exc:
            raise MalformedInputError(f"Файл не является изображением: {path}") from exc

        width, height = rgba.size
        return IconImage.from_rgba_data(width, height, rgba.tobytes())

    def compute_stats(self, image: IconImage) -> ImageStats:
        """Один проход по пикселям: использование альфы и набор цветов (не более 256)."""
        pixels = rgba_array(image)
        alpha = pixels[..., 3]
        translucent = alpha != 255
        has_alpha = bool(translucent.any())
        has_nonbinary_alpha = bool((translucent & (alpha != 0)).any())

        keys = np.unique(pack_rgb(pixels[..., :3]))
        colors = None
        if keys.size <= MAX_PALETTE_COLORS:
            colors = frozenset(
                (int(key) >> 16, (int(key) >> 8) & 0xFF, int(key) & 0xFF) for key in keys
            )
        return ImageStats(
            has_alpha=has_alpha,
            has_nonbinary_alpha=has_nonbinary_alpha,
            colors=colors,
        )
