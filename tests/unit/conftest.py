"""Shared fixtures for imgcmp-cli test suite."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from imgcmp.config import DEFAULT_SETTINGS, ComparisonConfig, resolve_config


def png_bytes(
    color: tuple[int, ...] | int,
    size: tuple[int, int] = (4, 4),
    mode: str = "RGBA",
) -> bytes:
    """Encode a solid-color image as PNG bytes."""
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


def solid(
    tmp_path: Path,
    name: str,
    color: tuple[int, ...],
    size: tuple[int, int] = (4, 4),
) -> Path:
    """Create a solid-color image file and return its path."""
    p = tmp_path / name
    Image.new("RGBA", size, color).save(p)
    return p


def with_block(
    base: tuple[int, int, int, int],
    block: tuple[int, int, int, int],
    count: int,
    size: int = 10,
) -> bytes:
    """PNG of a solid square whose first *count* pixels (row-major) use *block*."""
    img = Image.new("RGBA", (size, size), base)
    for i in range(count):
        img.putpixel((i % size, i // size), block)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def make_config():
    """Return a factory for configs built from default settings plus overrides."""

    def _make(**overrides: object) -> ComparisonConfig:
        return resolve_config({**DEFAULT_SETTINGS, **overrides})

    return _make
