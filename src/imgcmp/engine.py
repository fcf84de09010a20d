"""Difference engine adapter around a pixel-comparison primitive."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import numpy as np
from PIL import Image
from pixelmatch import pixelmatch

from imgcmp.config import ComparisonConfig
from imgcmp.errors import PreconditionViolation
from imgcmp.normalize import NormalizedRaster

log = logging.getLogger(__name__)

# ITU-R BT.601 luma weights, as used for grayscale background pixels.
_LUMA = np.array([0.29889531, 0.58662247, 0.11448223])


@dataclass(frozen=True)
class DiffRaster:
    """Rendered mismatch visualization, same layout as the input rasters."""

    width: int
    height: int
    data: bytes

    def to_image(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), self.data)

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self.to_image().save(buf, format="PNG")
        return buf.getvalue()

    def save(self, path: Path) -> None:
        """Write the raster as a standalone PNG file."""
        self.to_image().save(path, format="PNG")


class PixelComparator(Protocol):
    """Anything that can count mismatched pixels and render a diff."""

    def compare(
        self,
        a: NormalizedRaster,
        b: NormalizedRaster,
        config: ComparisonConfig,
    ) -> tuple[int, DiffRaster]: ...


def check_same_shape(a: NormalizedRaster, b: NormalizedRaster) -> None:
    """Fail fast if the two rasters cannot be compared pixel-for-pixel."""
    if (a.width, a.height) != (b.width, b.height):
        raise PreconditionViolation(
            f"raster size mismatch: {a.width}x{a.height} vs {b.width}x{b.height}"
        )
    expected = a.width * a.height * 4
    if len(a.data) != expected or len(b.data) != expected:
        raise PreconditionViolation(
            f"raster buffer length mismatch: {len(a.data)}/{len(b.data)}, expected {expected}"
        )


def _pixels(raster: NormalizedRaster) -> np.ndarray:
    return np.frombuffer(raster.data, dtype=np.uint8).reshape((raster.height, raster.width, 4))


def _luma_on_white(arr: np.ndarray) -> np.ndarray:
    """Luma of each pixel after compositing it over white."""
    rgb = arr[..., :3].astype(np.float64)
    alpha = arr[..., 3:4] / 255.0
    return (255.0 + (rgb - 255.0) * alpha) @ _LUMA


def _darker(arr_a: np.ndarray, arr_b: np.ndarray) -> np.ndarray:
    """Mask of pixels where the second image is darker than the first."""
    return _luma_on_white(arr_b) < _luma_on_white(arr_a)


class PixelmatchComparator:
    """Perceptual comparison backed by the ``pixelmatch`` library.

    pixelmatch draws every mismatch in ``diff_color``; mismatches where the
    second image is darker are then repainted in ``diff_color_alt``.
    """

    def compare(
        self,
        a: NormalizedRaster,
        b: NormalizedRaster,
        config: ComparisonConfig,
    ) -> tuple[int, DiffRaster]:
        check_same_shape(a, b)
        output = [0] * len(a.data)
        mismatched = pixelmatch(
            a.data,
            b.data,
            a.width,
            a.height,
            output,
            threshold=config.color_threshold,
            includeAA=config.include_anti_aliasing,
            alpha=config.blend_alpha,
            aa_color=config.anti_alias_color,
            diff_color=config.diff_color,
            diff_mask=config.diff_mask_only,
        )
        diff = np.clip(np.asarray(output, dtype=np.float64), 0, 255).astype(np.uint8)
        diff = diff.reshape((a.height, a.width, 4))

        arr_a, arr_b = _pixels(a), _pixels(b)
        marked = np.all(diff == np.array([*config.diff_color, 255], dtype=np.uint8), axis=2)
        changed = np.any(arr_a != arr_b, axis=2)
        diff[marked & changed & _darker(arr_a, arr_b)] = [*config.diff_color_alt, 255]
        return int(mismatched), DiffRaster(a.width, a.height, diff.tobytes())


class ExactComparator:
    """Strict comparison: a pixel mismatches if any RGBA channel differs.

    Matched pixels are drawn as grayscale faded towards white by
    ``blend_alpha`` (transparent when ``diff_mask_only``). Mismatches use
    ``diff_color``, or ``diff_color_alt`` where the second image is darker.
    """

    def compare(
        self,
        a: NormalizedRaster,
        b: NormalizedRaster,
        config: ComparisonConfig,
    ) -> tuple[int, DiffRaster]:
        check_same_shape(a, b)
        arr_a, arr_b = _pixels(a), _pixels(b)

        mask = np.any(arr_a != arr_b, axis=2)
        mismatched = int(np.count_nonzero(mask))

        diff = np.zeros(arr_a.shape, dtype=np.uint8)
        if not config.diff_mask_only:
            luma = arr_a[..., :3].astype(np.float64) @ _LUMA
            weight = config.blend_alpha * arr_a[..., 3] / 255.0
            gray = np.clip(255.0 + (luma - 255.0) * weight, 0, 255).astype(np.uint8)
            diff[..., 0] = gray
            diff[..., 1] = gray
            diff[..., 2] = gray
            diff[..., 3] = 255

        darker = _darker(arr_a, arr_b)
        diff[mask & ~darker] = [*config.diff_color, 255]
        diff[mask & darker] = [*config.diff_color_alt, 255]
        return mismatched, DiffRaster(a.width, a.height, diff.tobytes())


def compare_rasters(
    a: NormalizedRaster,
    b: NormalizedRaster,
    config: ComparisonConfig,
    comparator: PixelComparator | None = None,
) -> tuple[int, DiffRaster]:
    """Run *comparator* (pixelmatch by default) over two normalized rasters.

    Returns:
        (mismatched_pixel_count, diff_raster).

    Raises:
        PreconditionViolation: If the rasters differ in size.
    """
    check_same_shape(a, b)
    comparator = comparator or PixelmatchComparator()
    mismatched, diff = comparator.compare(a, b, config)
    log.debug(
        "%s: %d mismatched of %d", type(comparator).__name__, mismatched, a.width * a.height
    )
    return mismatched, diff
