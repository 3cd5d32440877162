import struct

import pytest

from conftest import BMP_1BPP_ICO, BMP_1BPP_RGBA, BMP_4BPP_ICO, BMP_4BPP_RGBA, make_image
from icokit.models.bmp_depth import BmpDepth
from icokit.models.errors import MalformedInputError
from icokit.services.bmp_service import BmpService
from icokit.services.image_service import ImageService


def _header(width: int, height: int, bits_per_pixel: int, header_len: int = 40) -> bytes:
    return struct.pack("<IiiHHIIiiII", header_len, width, height, 1, bits_per_pixel, 0, 0, 0, 0, 0, 0)


@pytest.fixture
def service() -> BmpService:
    return BmpService()


def test_decode_1bpp_payload(service):
    image = service.read_bmp(BMP_1BPP_ICO[22:])
    assert (image.width, image.height) == (2, 2)
    assert image.rgba_data == BMP_1BPP_RGBA


def test_decode_4bpp_payload(service):
    image = service.read_bmp(BMP_4BPP_ICO[22:])
    assert (image.width, image.height) == (5, 3)
    assert image.rgba_data == BMP_4BPP_RGBA


def test_decode_16bpp_expands_five_bit_channels(service):
    # 0x7c0f: red 31, green 0, blue 15
    data = _header(1, 2, 16) + b"\x0f\x7c\x00\x00" + b"\x00" * 4
    image = service.read_bmp(data)
    assert image.rgba_data == bytes([255, 0, 123, 255])


def test_decode_32bpp_ignores_mask(service):
    data = _header(1, 2, 32) + b"\x10\x20\x30\x40"
    image = service.read_bmp(data)
    assert image.rgba_data == bytes([0x30, 0x20, 0x10, 0x40])


def test_decode_24bpp_applies_mask(service):
    rows = b"\x01\x02\x03\x04\x05\x06\x00\x00"
    mask = b"\x40\x00\x00\x00"
    image = service.read_bmp(_header(2, 2, 24) + rows + mask)
    assert image.rgba_data == bytes([3, 2, 1, 255, 6, 5, 4, 0])


def test_read_size_halves_height(service):
    assert service.read_bmp_size(_header(7, 10, 32)) == (7, 5)


@pytest.mark.parametrize(
    "header",
    [
        _header(2, 4, 32, header_len=108),
        _header(0, 4, 32),
        _header(2, 3, 32),
        _header(2, 0, 32),
        _header(2, -4, 32),
        b"\x28\x00",
    ],
)
def test_read_size_rejects_bad_headers(service, header):
    with pytest.raises(MalformedInputError):
        service.read_bmp_size(header)


def test_decode_rejects_unsupported_depth(service):
    with pytest.raises(MalformedInputError, match="bits-per-pixel"):
        service.read_bmp(_header(1, 2, 2) + b"\x00" * 16)


def test_decode_rejects_truncated_data(service):
    payload = BMP_4BPP_ICO[22:]
    with pytest.raises(MalformedInputError):
        service.read_bmp(payload[:-1])
    with pytest.raises(MalformedInputError):
        service.read_bmp(payload[:60])


def test_encode_two_colors_exact_layout(service):
    red, green = (255, 0, 0, 255), (0, 255, 0, 255)
    image = make_image(2, 2, lambda i: [red, green, red, red][i])
    num_colors, bits_per_pixel, data = service.write_bmp(image, ImageService().compute_stats(image))
    assert (num_colors, bits_per_pixel) == (2, 1)
    expected = (
        _header(2, 4, 1)
        + b"\x00\xff\x00\x00\x00\x00\xff\x00"  # palette sorted: green, red
        + b"\xc0\x00\x00\x00\x80\x00\x00\x00"  # bottom row first
        + b"\x00" * 8
    )
    assert data == expected


def test_encode_mask_marks_fully_transparent_pixels(service):
    image = make_image(3, 1, lambda i: (9, 9, 9, 0 if i == 1 else 255))
    _num_colors, bits_per_pixel, data = service.write_bmp(image, ImageService().compute_stats(image))
    assert bits_per_pixel == 1
    assert data[-4:] == b"\x40\x00\x00\x00"
    assert service.read_bmp(data).rgba_data == image.rgba_data


def test_eight_bpp_reports_zero_color_count(service):
    image = make_image(31, 29, lambda i: (i % 50, 0, 0, 255))
    num_colors, bits_per_pixel, data = service.write_bmp(image, ImageService().compute_stats(image))
    assert (num_colors, bits_per_pixel) == (0, 8)
    assert len(data) == 40 + 1024 + 29 * 32 + 29 * 4


@pytest.mark.parametrize(
    "width, height, pixel, expected",
    [
        (2, 2, lambda i: (i % 2, 0, 0, 255), BmpDepth.ONE),
        (13, 7, lambda i: (i % 10, 0, 0, 255), BmpDepth.FOUR),
        (31, 29, lambda i: (i % 50, 0, 0, 255), BmpDepth.EIGHT),
        (10, 5, lambda i: (i % 50, 0, 0, 255), BmpDepth.TWENTY_FOUR),
        (24, 24, lambda i: (i % 100, (i // 100) % 5, 0, 255), BmpDepth.TWENTY_FOUR),
        (2, 2, lambda i: (255 * (i % 2), 0, 0, 0x7F), BmpDepth.THIRTY_TWO),
    ],
)
def test_select_depth(service, width, height, pixel, expected):
    image = make_image(width, height, pixel)
    depth, _colors = service.select_depth(image, ImageService().compute_stats(image))
    assert depth is expected


@pytest.mark.parametrize("width", [1, 7, 8, 9, 33])
def test_round_trip_every_row_width(service, width):
    image = make_image(width, 3, lambda i: (i % 3 * 100, 0, 50, 0 if i % 4 == 0 else 255))
    _num_colors, _bpp, data = service.write_bmp(image, ImageService().compute_stats(image))
    assert service.read_bmp(data).rgba_data == image.rgba_data
