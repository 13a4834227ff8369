"""Shared fixtures for family-moments tests."""

import logging
from io import BytesIO

import pytest
import structlog
from PIL import Image

from family_moments.models.moment_store import MomentStore
from family_moments.storage.kv_store import MemoryKeyValueStore


@pytest.fixture(autouse=True)
def _reset_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers = handlers
    root.setLevel(level)


def _image_bytes(width: int, height: int, fmt: str = "PNG", color=(200, 80, 40)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_image():
    """Factory returning encoded image bytes of the given pixel size."""
    return _image_bytes


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return MomentStore(kv)


@pytest.fixture
def photo_dir(tmp_path):
    """A directory with two valid photos and one corrupt one."""
    d = tmp_path / "photos"
    d.mkdir()
    (d / "a.png").write_bytes(_image_bytes(40, 30))
    (d / "b.jpg").write_bytes(_image_bytes(30, 40, fmt="JPEG"))
    (d / "broken.jpg").write_bytes(b"not really a jpeg")
    return d


@pytest.fixture
def make_rotated_jpeg():
    """Factory for a JPEG whose EXIF Orientation tag says to rotate 90 degrees (tag 6)."""

    def _make(width: int = 40, height: int = 20) -> bytes:
        exif = Image.Exif()
        exif[0x0112] = 6
        buf = BytesIO()
        Image.new("RGB", (width, height), (10, 120, 200)).save(buf, format="JPEG", exif=exif)
        return buf.getvalue()

    return _make


@pytest.fixture
def small_pixel_limit(monkeypatch):
    """Lower Pillow's decompression-bomb limit so small fixtures trip it."""
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
