"""Мост к PNG: декодирование/кодирование через Pillow и приведение к RGBA.

Принципы:
- SRP: механику PNG выполняет Pillow; здесь только проверка заголовка IHDR
  (8 бит на канал, без палитры) и нормализация каналов в RGBA.
- Ошибки Pillow переупаковываются в `MalformedInputError` с сохранением причины.
"""
from __future__ import annotations

import io
import struct
from typing import BinaryIO, Optional, Tuple

import numpy as np
from PIL import Image

from icokit.models.errors import MalformedInputError
from icokit.models.icon_dir import PNG_SIGNATURE
from icokit.models.icon_image import MIN_HEIGHT, MIN_WIDTH, IconImage
from icokit.models.image_stats import ImageStats
from icokit.services.image_service import ImageService, rgba_array

# IHDR color type -> Pillow mode at 8 bits per channel
_COLOR_MODES = {
    0: "L",
    2: "RGB",
    4: "LA",
    6: "RGBA",
}
_INDEXED_COLOR_TYPE = 3


class PngService:
    def __init__(self, image_service: Optional[ImageService] = None) -> None:
        self._image_service = image_service or ImageService()

    # ---- Public API ----
    def read_png(self, stream: BinaryIO) -> IconImage:
        """Читает самостоятельный PNG-файл из потока."""
        return self.decode_png(stream.read())

    def write_png(self, image: IconImage, stream: BinaryIO) -> None:
        """Записывает растр в поток как самостоятельный PNG-файл."""
        _bits_per_pixel, data = self.encode_png(image, self._image_service.compute_stats(image))
        stream.write(data)

    # ---- Decoding ----
    def read_png_info(self, data: bytes) -> Tuple[int, int, int]:
        """Разбирает IHDR: возвращает (ширина, высота, тип цвета) или бросает `MalformedInputError`."""
        # signature(8) + chunk length(4) + b"IHDR"(4) + width, height, depth, color type
        if len(data) < 26 or not data.startswith(PNG_SIGNATURE) or data[12:16] != b"IHDR":
            raise MalformedInputError("Malformed PNG data: missing IHDR chunk")
        width, height, bit_depth, color_type = struct.unpack_from(">IIBB", data, 16)
        if width < MIN_WIDTH:
            raise MalformedInputError(
                f"Invalid PNG width (was {width}, but must be at least {MIN_WIDTH})"
            )
        if height < MIN_HEIGHT:
            raise MalformedInputError(
                f"Invalid PNG height (was {height}, but must be at least {MIN_HEIGHT})"
            )
        if color_type == _INDEXED_COLOR_TYPE:
            raise MalformedInputError("Unsupported PNG color type: Indexed")
        if bit_depth != 8:
            raise MalformedInputError(f"Unsupported PNG bit depth: {bit_depth}")
        if color_type not in _COLOR_MODES:
            raise MalformedInputError(f"Invalid PNG color type: {color_type}")
        return width, height, color_type

    def read_png_size(self, data: bytes) -> Tuple[int, int]:
        width, height, _color_type = self.read_png_info(data)
        return width, height

    def decode_png(self, data: bytes) -> IconImage:
        """Декодирует PNG-байты в RGBA-растр.

        RGBA проходит как есть; RGB получает альфу 255; оттенки серого
        размножаются в R, G, B (с альфой из LA или 255).
        """
        width, height, color_type = self.read_png_info(data)
        expected_mode = _COLOR_MODES[color_type]
        try:
            with Image.open(io.BytesIO(data), formats=["PNG"]) as pil_image:
                pil_image.load()
                mode = pil_image.mode
                size = pil_image.size
                raw = pil_image.tobytes()
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
            raise MalformedInputError(f"Malformed PNG data: {exc}") from exc
        if mode != expected_mode or size != (width, height):
            raise MalformedInputError(
                f"Malformed PNG data: decoded {mode} {size[0]}x{size[1]}, "
                f"expected {expected_mode} {width}x{height}"
            )

        return IconImage.from_rgba_data(width, height, self._to_rgba(raw, mode))

    def _to_rgba(self, raw: bytes, mode: str) -> bytes:
        if mode == "RGBA":
            return raw
        channels = np.frombuffer(raw, dtype=np.uint8).reshape(-1, len(mode))
        opaque = np.full(channels.shape[0], 255, dtype=np.uint8)
        if mode == "RGB":
            rgba = np.column_stack([channels, opaque])
        elif mode == "LA":
            gray = channels[:, 0]
            rgba = np.column_stack([gray, gray, gray, channels[:, 1]])
        else:
            gray = channels[:, 0]
            rgba = np.column_stack([gray, gray, gray, opaque])
        return rgba.astype(np.uint8).tobytes()

    # ---- Encoding ----
    def encode_png(self, image: IconImage, stats: ImageStats) -> Tuple[int, bytes]:
        """Кодирует растр в PNG; возвращает (bits-per-pixel, данные).

        Без прозрачности альфа-канал отбрасывается (RGB, 24), иначе RGBA (32).
        """
        # TODO: detect grayscale images and encode them as L/LA.
        size = (image.width, image.height)
        if stats.has_alpha:
            pil_image = Image.frombytes("RGBA", size, image.rgba_data)
            bits_per_pixel = 32
        else:
            rgb = np.ascontiguousarray(rgba_array(image)[..., :3])
            pil_image = Image.frombytes("RGB", size, rgb.tobytes())
            bits_per_pixel = 24
        buffer = io.BytesIO()
        pil_image.save(buffer, format="PNG")
        return bits_per_pixel, buffer.getvalue()
