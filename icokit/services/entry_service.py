"""Кодирование растров в записи каталога и декодирование записей обратно.

Принципы:
- SRP: выбор подформата (PNG или BMP) и сборка `IconDirEntry`; побитовая
  работа делегируется `BmpService` и `PngService`.
- DIP: сервисы-кодеки передаются в конструктор, по умолчанию создаются свои.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from icokit.models.errors import MalformedInputError
from icokit.models.icon_dir import IconDirEntry
from icokit.models.icon_image import IconImage
from icokit.models.image_stats import ImageStats
from icokit.models.resource_type import ResourceType
from icokit.services.bmp_service import BmpService
from icokit.services.image_service import ImageService
from icokit.services.png_service import PngService

logger = logging.getLogger(__name__)

# Images larger than 64x64 go to PNG for its compression.
PNG_PIXEL_THRESHOLD = 64 * 64


class EntryService:
    def __init__(
        self,
        image_service: Optional[ImageService] = None,
        bmp_service: Optional[BmpService] = None,
        png_service: Optional[PngService] = None,
    ) -> None:
        self._image_service = image_service or ImageService()
        self._bmp_service = bmp_service or BmpService()
        self._png_service = png_service or PngService(self._image_service)

    # ---------- Декодирование ----------
    def decode_size(self, entry: IconDirEntry) -> Tuple[int, int]:
        """Читает из данных записи только ширину и высоту."""
        if entry.is_png:
            return self._png_service.read_png_size(entry.data)
        return self._bmp_service.read_bmp_size(entry.data)

    def decode(self, entry: IconDirEntry) -> IconImage:
        """Декодирует запись в растр; для курсоров переносит hotspot в изображение.

        Raises:
            MalformedInputError: данные повреждены или размеры не совпадают с записью.
        """
        if entry.is_png:
            image = self._png_service.decode_png(entry.data)
        else:
            image = self._bmp_service.read_bmp(entry.data)
        if image.width != entry.width or image.height != entry.height:
            raise MalformedInputError(
                f"Encoded image has wrong dimensions (was {image.width}x{image.height}, "
                f"but should be {entry.width}x{entry.height})"
            )
        image.hotspot = entry.cursor_hotspot
        return image

    # ---------- Кодирование ----------
    def encode(self, image: IconImage) -> IconDirEntry:
        """Кодирует растр, выбирая подформат автоматически.

        PNG берётся для сложной альфы и для больших изображений, где его
        сжатие заметно выигрывает; иначе BMP ради старых потребителей ICO.
        """
        stats = self._image_service.compute_stats(image)
        use_png = stats.has_nonbinary_alpha or image.num_pixels > PNG_PIXEL_THRESHOLD
        logger.debug(
            "Auto-selected %s for %dx%d image", "PNG" if use_png else "BMP", image.width, image.height
        )
        if use_png:
            return self._encode_png(image, stats)
        return self._encode_bmp(image, stats)

    def encode_as_bmp(self, image: IconImage) -> IconDirEntry:
        """Кодирует растр как BMP; глубина цвета выбирается по содержимому."""
        return self._encode_bmp(image, self._image_service.compute_stats(image))

    def encode_as_png(self, image: IconImage) -> IconDirEntry:
        """Кодирует растр как PNG (RGB или RGBA по наличию прозрачности)."""
        return self._encode_png(image, self._image_service.compute_stats(image))

    def _encode_bmp(self, image: IconImage, stats: ImageStats) -> IconDirEntry:
        num_colors, bits_per_pixel, data = self._bmp_service.write_bmp(image, stats)
        return self._make_entry(image, num_colors, 1, bits_per_pixel, data)

    def _encode_png(self, image: IconImage, stats: ImageStats) -> IconDirEntry:
        bits_per_pixel, data = self._png_service.encode_png(image, stats)
        return self._make_entry(image, 0, 0, bits_per_pixel, data)

    def _make_entry(
        self,
        image: IconImage,
        num_colors: int,
        color_planes: int,
        bits_per_pixel: int,
        data: bytes,
    ) -> IconDirEntry:
        # cursors store the hotspot in place of planes/bpp
        if image.hotspot is not None:
            resource_type = ResourceType.CURSOR
            color_planes, bits_per_pixel = image.hotspot
        else:
            resource_type = ResourceType.ICON
        return IconDirEntry(
            resource_type=resource_type,
            width=image.width,
            height=image.height,
            num_colors=num_colors,
            color_planes=color_planes,
            bits_per_pixel_field=bits_per_pixel,
            data=data,
        )
