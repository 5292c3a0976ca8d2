import base64
import os
from io import BytesIO

import pytest
from PIL import Image

from badgeforge.services.image_optimizer import ImageOptimizer, compress_to_data_uri


def png_bytes(size, mode="RGB", color=(200, 30, 30)):
    output = BytesIO()
    Image.new(mode, size, color).save(output, format="PNG")
    return output.getvalue()


def test_large_photo_is_resized_to_max_dimension():
    data = ImageOptimizer.compress(png_bytes((1600, 1200)))
    img = Image.open(BytesIO(data))
    assert img.format == "JPEG"
    assert img.size == (800, 600)


def test_transparent_areas_become_white():
    data = ImageOptimizer.compress(png_bytes((20, 20), mode="RGBA", color=(0, 0, 0, 0)))
    r, g, b = Image.open(BytesIO(data)).convert("RGB").getpixel((10, 10))
    assert min(r, g, b) > 240


def test_noisy_photo_fits_size_limit():
    noise = Image.frombytes("RGB", (800, 800), os.urandom(800 * 800 * 3))
    output = BytesIO()
    noise.save(output, format="PNG")

    data = ImageOptimizer.compress(output.getvalue(), max_bytes=60 * 1024)
    assert Image.open(BytesIO(data)).size[0] <= 800


def test_data_uri_round_trip():
    uri = compress_to_data_uri(png_bytes((40, 30)))
    assert uri.startswith("data:image/jpeg;base64,")
    base64.b64decode(uri.split(",", 1)[1])
    assert ImageOptimizer.load_data_uri(uri).size == (40, 30)


def test_unreadable_bytes_raise_oserror():
    with pytest.raises(OSError):
        ImageOptimizer.compress(b"definitely not an image")


def test_load_data_uri_rejects_plain_strings():
    with pytest.raises(ValueError):
        ImageOptimizer.load_data_uri("https://example.com/photo.png")
