import io

import pytest
from PIL import Image


def make_png(size=(1200, 800), color=(235, 235, 235)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def photo(tmp_path, png_bytes):
    p = tmp_path / "photo.png"
    p.write_bytes(png_bytes)
    return p
