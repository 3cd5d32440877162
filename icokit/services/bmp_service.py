"""Кодек BMP-подформата записей ICO/CUR (BITMAPINFOHEADER + палитра + XOR + AND-маска).

Принципы:
- SRP: только побитовое (де)кодирование BMP; выбор PNG/BMP делает `EntryService`.
- Строки хранятся снизу вверх и выровнены до 4 байт; вся упаковка строк
  векторизована через numpy.
"""
from __future__ import annotations

import logging
import struct
from typing import List, Tuple

import numpy as np

from icokit.models.bmp_depth import BmpDepth
from icokit.models.errors import InvalidUsageError, MalformedInputError
from icokit.models.icon_image import MIN_HEIGHT, MIN_WIDTH, IconImage
from icokit.models.image_stats import ImageStats, Rgb
from icokit.services.image_service import pack_rgb, rgba_array

logger = logging.getLogger(__name__)

# The size of a BITMAPINFOHEADER struct, in bytes.
BMP_HEADER_LEN = 40
# Below this many pixels a 256-entry color table costs more than 24 bpp.
PALETTE_MIN_PIXELS = 512

# size, width, height, planes, bpp, compression, image size,
# horz ppm, vert ppm, colors used, colors important
_HEADER = struct.Struct("<IiiHHIIiiII")


def _row_sizes(width: int, bits_per_pixel: int) -> Tuple[int, int]:
    """Возвращает (байт данных в строке, байт в строке с выравниванием до 4)."""
    data_size = (width * bits_per_pixel + 7) // 8
    return data_size, ((data_size + 3) // 4) * 4


class BmpService:
    # ---------- Чтение ----------
    def read_bmp_size(self, data: bytes) -> Tuple[int, int]:
        """Читает из заголовка только ширину и логическую высоту (высота в заголовке удвоена)."""
        if len(data) < 12:
            raise MalformedInputError("Truncated BMP header")
        header_len, width, height = struct.unpack_from("<Iii", data, 0)
        if header_len != BMP_HEADER_LEN:
            raise MalformedInputError(
                f"Invalid BMP header size (was {header_len}, must be {BMP_HEADER_LEN})"
            )
        if width < MIN_WIDTH:
            raise MalformedInputError(
                f"Invalid BMP width (was {width}, but must be at least {MIN_WIDTH})"
            )
        if height % 2 != 0:
            # color rows and mask rows are counted together
            raise MalformedInputError(
                f"Invalid height field in BMP header (was {height}, but must be divisible by 2)"
            )
        height //= 2
        if height < MIN_HEIGHT:
            raise MalformedInputError(
                f"Invalid BMP height (was {height}, but must be at least {MIN_HEIGHT})"
            )
        return width, height

    def read_bmp(self, data: bytes) -> IconImage:
        """Декодирует BMP-данные записи в RGBA-растр.

        Raises:
            MalformedInputError: неверный заголовок, неподдерживаемая глубина
                или данных меньше, чем требуют размеры.
        """
        width, height = self.read_bmp_size(data)
        if len(data) < BMP_HEADER_LEN:
            raise MalformedInputError("Truncated BMP header")
        bits_per_pixel = _HEADER.unpack_from(data, 0)[4]
        depth = BmpDepth.from_bits_per_pixel(bits_per_pixel)
        if depth is None:
            raise MalformedInputError(f"Unsupported BMP bits-per-pixel ({bits_per_pixel})")

        offset = BMP_HEADER_LEN
        num_colors = depth.num_colors
        table = self._take(data, offset, 4 * num_colors, "color table").reshape(num_colors, 4)
        palette = table[:, 2::-1]  # BGR0 -> RGB
        offset += 4 * num_colors

        row_data_size, row_size = _row_sizes(width, bits_per_pixel)
        rows = self._take_rows(data, offset, height, row_size, "color data")
        offset += height * row_size
        rows = rows[:, :row_data_size]

        alpha = np.full((height, width), 255, dtype=np.uint8)
        if depth is BmpDepth.ONE:
            rgb = palette[np.unpackbits(rows, axis=1)[:, :width]]
        elif depth is BmpDepth.FOUR:
            nibbles = np.empty((height, 2 * row_data_size), dtype=np.uint8)
            nibbles[:, 0::2] = rows >> 4
            nibbles[:, 1::2] = rows & 0x0F
            rgb = palette[nibbles[:, :width]]
        elif depth is BmpDepth.EIGHT:
            rgb = palette[rows[:, :width]]
        elif depth is BmpDepth.SIXTEEN:
            words = rows.astype(np.uint32)
            color = words[:, 0::2] | (words[:, 1::2] << 8)
            channels = [((color >> shift) & 0x1F) for shift in (10, 5, 0)]
            rgb = np.stack([(c * 255 + 15) // 31 for c in channels], axis=2).astype(np.uint8)
        elif depth is BmpDepth.TWENTY_FOUR:
            rgb = rows.reshape(height, width, 3)[..., ::-1]
        else:
            bgra = rows.reshape(height, width, 4)
            rgb = bgra[..., 2::-1]
            alpha = bgra[..., 3].copy()

        # 32 bpp carries alpha in the color data; the AND mask is not consulted
        if depth is not BmpDepth.THIRTY_TWO:
            mask_data_size, mask_size = _row_sizes(width, 1)
            mask_rows = self._take_rows(data, offset, height, mask_size, "mask data")
            bits = np.unpackbits(mask_rows[:, :mask_data_size], axis=1)[:, :width]
            alpha[bits == 1] = 0

        rgba = np.concatenate([rgb, alpha[..., np.newaxis]], axis=2).astype(np.uint8)
        return IconImage.from_rgba_data(width, height, rgba.tobytes())

    # ---------- Запись ----------
    def select_depth(self, image: IconImage, stats: ImageStats) -> Tuple[BmpDepth, List[Rgb]]:
        """Выбирает глубину цвета и палитру (отсортированную) для кодирования.

        Полупрозрачность возможна только в 32 bpp: таблица цветов BMP не
        хранит альфу, а маска однобитная.
        """
        if stats.has_nonbinary_alpha:
            return BmpDepth.THIRTY_TWO, []
        if stats.colors is None:
            return BmpDepth.TWENTY_FOUR, []
        colors = sorted(stats.colors)
        if len(colors) <= 2:
            return BmpDepth.ONE, colors
        if len(colors) <= 16:
            return BmpDepth.FOUR, colors
        if image.num_pixels < PALETTE_MIN_PIXELS:
            return BmpDepth.TWENTY_FOUR, []
        return BmpDepth.EIGHT, colors

    def write_bmp(self, image: IconImage, stats: ImageStats) -> Tuple[int, int, bytes]:
        """Кодирует растр в BMP.

        Returns:
            (байт num_colors для каталога, bits-per-pixel, закодированные данные).
        """
        depth, colors = self.select_depth(image, stats)
        bits_per_pixel = depth.bits_per_pixel
        num_colors = depth.num_colors
        logger.debug(
            "Encoding %dx%d BMP at %d bpp (%d palette colors)",
            image.width, image.height, bits_per_pixel, len(colors),
        )

        pixels = rgba_array(image)
        height, width = image.height, image.width

        header = _HEADER.pack(BMP_HEADER_LEN, width, 2 * height, 1, bits_per_pixel, 0, 0, 0, 0, 0, 0)

        palette_keys = np.array([(r << 16) | (g << 8) | b for r, g, b in colors], dtype=np.uint32)
        color_table = b"".join(bytes((b, g, r, 0)) for r, g, b in colors)
        color_table += b"\x00" * (4 * (num_colors - len(colors)))

        if depth in (BmpDepth.ONE, BmpDepth.FOUR, BmpDepth.EIGHT):
            indices = np.searchsorted(palette_keys, pack_rgb(pixels[..., :3])).astype(np.uint8)
            if depth is BmpDepth.ONE:
                packed = np.packbits(indices, axis=1)
            elif depth is BmpDepth.FOUR:
                if width % 2:
                    indices = np.pad(indices, ((0, 0), (0, 1)))
                packed = (indices[:, 0::2] << 4) | indices[:, 1::2]
            else:
                packed = indices
        elif depth is BmpDepth.TWENTY_FOUR:
            packed = pixels[..., 2::-1].reshape(height, 3 * width)
        elif depth is BmpDepth.THIRTY_TWO:
            packed = pixels[..., [2, 1, 0, 3]].reshape(height, 4 * width)
        else:
            raise InvalidUsageError("Encoding 16-bpp BMPs is not implemented")

        color_data = self._pad_rows(packed, _row_sizes(width, bits_per_pixel)[1])
        mask_bits = np.packbits((pixels[..., 3] == 0).astype(np.uint8), axis=1)
        mask_data = self._pad_rows(mask_bits, _row_sizes(width, 1)[1])

        data = header + color_table + color_data + mask_data
        return num_colors & 0xFF, bits_per_pixel, data

    # ---------- Вспомогательные функции ----------
    def _take(self, data: bytes, offset: int, size: int, what: str) -> np.ndarray:
        if len(data) < offset + size:
            raise MalformedInputError(
                f"Truncated BMP {what} (need {offset + size} bytes, have {len(data)})"
            )
        if size == 0:
            return np.zeros(0, dtype=np.uint8)
        return np.frombuffer(data, dtype=np.uint8, count=size, offset=offset)

    def _take_rows(self, data: bytes, offset: int, height: int, row_size: int, what: str) -> np.ndarray:
        """Читает строки, хранимые снизу вверх, и возвращает их сверху вниз."""
        rows = self._take(data, offset, height * row_size, what).reshape(height, row_size)
        return rows[::-1]

    def _pad_rows(self, packed: np.ndarray, row_size: int) -> bytes:
        """Дополняет строки нулями до `row_size` и разворачивает их снизу вверх."""
        height, row_data_size = packed.shape
        out = np.zeros((height, row_size), dtype=np.uint8)
        out[:, :row_data_size] = packed
        return out[::-1].tobytes()
