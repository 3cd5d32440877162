import pytest

from icokit.models.icon_image import IconImage

# Reference ICO files with a single entry each.
BMP_1BPP_ICO = (
    b"\x00\x00\x01\x00\x01\x00"
    b"\x02\x02\x02\x00\x01\x00\x01\x00"
    b"\x40\x00\x00\x00\x16\x00\x00\x00"
    b"\x28\x00\x00\x00\x02\x00\x00\x00\x04\x00\x00\x00"
    b"\x01\x00\x01\x00\x00\x00\x00\x00\x00\x00\x00\x00"
    b"\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00"
    b"\x00\x00\x00\x00"
    b"\x55\x00\x55\x00\xff\xff\xff\x00"
    b"\xc0\x00\x00\x00"
    b"\x40\x00\x00\x00"
    b"\x40\x00\x00\x00"
    b"\x00\x00\x00\x00"
)
BMP_1BPP_RGBA = (
    b"\x55\x00\x55\xff\xff\xff\xff\xff"
    b"\xff\xff\xff\xff\xff\xff\xff\x00"
)

BMP_4BPP_ICO = (
    b"\x00\x00\x01\x00\x01\x00"
    b"\x05\x03\x10\x00\x01\x00\x04\x00"
    b"\x80\x00\x00\x00\x16\x00\x00\x00"
    b"\x28\x00\x00\x00\x05\x00\x00\x00\x06\x00\x00\x00"
    b"\x01\x00\x04\x00\x00\x00\x00\x00\x00\x00\x00\x00"
    b"\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00"
    b"\x00\x00\x00\x00"
    b"\x00\x00\x00\x00\x00\x00\x00\x00"
    b"\x00\x00\x7f\x00\x00\x00\xff\x00"
    b"\x00\x7f\x00\x00\x00\xff\x00\x00"
    b"\x00\x7f\x7f\x00\x00\xff\xff\x00"
    b"\x7f\x00\x00\x00\xff\x00\x00\x00"
    b"\x7f\x00\x7f\x00\xff\x00\xff\x00"
    b"\x7f\x7f\x00\x00\xff\xff\x00\x00"
    b"\x7f\x7f\x7f\x00\xff\xff\xff\x00"
    b"\x0f\x35\x00\x00"
    b"\xf3\x59\x10\x00"
    b"\x05\x91\x00\x00"
    b"\x88\x00\x00\x00"
    b"\x00\x00\x00\x00"
    b"\x88\x00\x00\x00"
)
BMP_4BPP_RGBA = (
    b"\x00\x00\x00\x00\x00\xff\x00\xff\x00\x00\xff\xff"
    b"\x00\x00\x00\xff\x00\x00\x00\x00"
    b"\xff\xff\xff\xff\xff\x00\x00\xff\x00\xff\x00\xff"
    b"\x00\x00\xff\xff\x00\x00\x00\xff"
    b"\x00\x00\x00\x00\xff\xff\xff\xff\xff\x00\x00\xff"
    b"\x00\xff\x00\xff\x00\x00\x00\x00"
)

PNG_GRAYSCALE_ICO = (
    b"\x00\x00\x01\x00\x01\x00"
    b"\x02\x02\x00\x00\x00\x00\x00\x00"
    b"\x47\x00\x00\x00\x16\x00\x00\x00"
    b"\x89\x50\x4e\x47\x0d\x0a\x1a\x0a\x00\x00\x00\x0d\x49\x48\x44\x52"
    b"\x00\x00\x00\x02\x00\x00\x00\x02\x08\x00\x00\x00\x00\x57\xdd\x52"
    b"\xf8\x00\x00\x00\x0e\x49\x44\x41\x54\x78\x9c\x63\xb4\x77\x60\xdc"
    b"\xef\x00\x00\x04\x08\x01\x81\x86\x2e\xc9\x8d\x00\x00\x00\x00\x49"
    b"\x45\x4e\x44\xae\x42\x60\x82"
)
PNG_GRAYSCALE_RGBA = (
    b"\x3f\x3f\x3f\xff\x7f\x7f\x7f\xff"
    b"\xbf\xbf\xbf\xff\xff\xff\xff\xff"
)


def make_image(width: int, height: int, pixel) -> IconImage:
    """Строит растр, вызывая `pixel(index)` -> (r, g, b, a) для каждого пикселя."""
    data = bytearray()
    for index in range(width * height):
        data.extend(pixel(index))
    return IconImage.from_rgba_data(width, height, bytes(data))


@pytest.fixture
def patterned_image() -> IconImage:
    # 11x13 with alpha 128 on every 7th pixel
    return make_image(
        11,
        13,
        lambda i: (
            0 if i % 2 == 0 else 255,
            0 if i % 3 == 0 else 255,
            0 if i % 5 == 0 else 255,
            128 if i % 7 == 0 else 255,
        ),
    )
