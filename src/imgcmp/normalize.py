"""Decode source images and resample them onto a common square grid."""

from __future__ import annotations

import io
import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from imgcmp.errors import DecodeError

log = logging.getLogger(__name__)

ImageSource = bytes | Path


@dataclass(frozen=True)
class NormalizedRaster:
    """RGBA pixels, row-major from the top-left corner, 4 bytes per pixel."""

    width: int
    height: int
    data: bytes


def _label(source: ImageSource) -> str:
    if isinstance(source, Path):
        return str(source)
    return f"<{len(source)} bytes>"


def decode_image(source: ImageSource) -> Image.Image:
    """Fully decode *source* (raw bytes or a file path).

    Raises:
        DecodeError: If the data is missing, unreadable or not a supported image.
    """
    try:
        if isinstance(source, Path):
            img = Image.open(source)
        else:
            img = Image.open(io.BytesIO(source))
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(_label(source), str(exc)) from exc
    try:
        img.load()
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        img.close()
        raise DecodeError(_label(source), str(exc)) from exc
    return img


def normalize_image(source: ImageSource, sample_dimension: int) -> NormalizedRaster:
    """Decode *source* and resize it to ``sample_dimension`` square RGBA.

    Both axes are forced to the same size, so the aspect ratio is not kept.
    Bilinear resampling is used for every image.

    Raises:
        ValueError: If *sample_dimension* is not positive.
        DecodeError: If the source cannot be decoded.
    """
    if sample_dimension <= 0:
        raise ValueError(f"sample dimension must be positive, got {sample_dimension}")
    with decode_image(source) as img:
        log.debug("decoded %s: %s %dx%d", _label(source), img.mode, img.width, img.height)
        try:
            rgba = img.convert("RGBA")
        except ValueError as exc:
            raise DecodeError(_label(source), f"unsupported mode {img.mode}: {exc}") from exc
    try:
        size = (sample_dimension, sample_dimension)
        scaled = rgba if rgba.size == size else rgba.resize(size, Image.BILINEAR)
        data = scaled.tobytes()
    finally:
        rgba.close()
    return NormalizedRaster(width=sample_dimension, height=sample_dimension, data=data)


def _normalize_into(
    source: ImageSource,
    sample_dimension: int,
    out: list[NormalizedRaster | None],
    errors: list[BaseException | None],
    idx: int,
) -> None:
    """Worker for one side. Stores the raster or the exception at idx."""
    try:
        out[idx] = normalize_image(source, sample_dimension)
    except Exception as exc:  # noqa: BLE001
        errors[idx] = exc


def normalize_pair(
    source_a: ImageSource,
    source_b: ImageSource,
    sample_dimension: int,
) -> tuple[NormalizedRaster, NormalizedRaster]:
    """Normalize both sides concurrently and wait for both to finish.

    Returns:
        (raster_a, raster_b), always of identical dimensions.

    Raises:
        DecodeError: If either side fails to decode. Side A's error wins when
            both fail.
    """
    out: list[NormalizedRaster | None] = [None, None]
    errors: list[BaseException | None] = [None, None]
    t_a = threading.Thread(
        target=_normalize_into, args=(source_a, sample_dimension, out, errors, 0), daemon=True
    )
    t_b = threading.Thread(
        target=_normalize_into, args=(source_b, sample_dimension, out, errors, 1), daemon=True
    )
    t_a.start()
    t_b.start()
    t_a.join()
    t_b.join()

    for err in errors:
        if err is not None:
            raise err
    raster_a, raster_b = out
    assert raster_a is not None and raster_b is not None
    return raster_a, raster_b
