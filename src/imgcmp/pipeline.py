"""End-to-end comparison: normalize, diff, classify."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from imgcmp.classify import ComparisonResult, classify
from imgcmp.config import ComparisonConfig
from imgcmp.engine import DiffRaster, PixelComparator, compare_rasters
from imgcmp.errors import ComparisonInProgress
from imgcmp.normalize import ImageSource, normalize_pair

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ComparisonOutcome:
    """Everything handed to the presentation layer after a successful run."""

    result: ComparisonResult
    diff: DiffRaster


def compare_sources(
    source_a: ImageSource,
    source_b: ImageSource,
    config: ComparisonConfig,
    comparator: PixelComparator | None = None,
) -> ComparisonOutcome:
    """Compare two source images under *config*.

    Both sources are decoded and resampled from scratch on every call. The run
    is all-or-nothing: any failure propagates and no partial result is built.

    Args:
        source_a: First image, raw bytes or a file path.
        source_b: Second image, raw bytes or a file path.
        config: Resolved comparison settings.
        comparator: Pixel comparison backend (pixelmatch by default).

    Raises:
        DecodeError: If either image cannot be decoded.
    """
    n = config.sample_dimension
    log.debug("comparing at %dx%d", n, n)
    raster_a, raster_b = normalize_pair(source_a, source_b, n)
    mismatched, diff = compare_rasters(raster_a, raster_b, config, comparator)
    result = classify(mismatched, config.total_pixels)
    log.info(
        "%d/%d pixels differ (%.2f%%): %s",
        result.mismatched_pixels,
        result.total_pixels,
        result.diff_percent,
        result.category.label,
    )
    return ComparisonOutcome(result=result, diff=diff)


class SingleFlight:
    """Reject a new run while a previous one is still in flight."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def run(self, fn: Callable[..., T], *args: object, **kwargs: object) -> T:
        if not self._lock.acquire(blocking=False):
            raise ComparisonInProgress("a comparison is already running")
        try:
            return fn(*args, **kwargs)
        finally:
            self._lock.release()


class ComparisonSession:
    """The current pair of images, each side replaceable independently."""

    def __init__(self, comparator: PixelComparator | None = None) -> None:
        self.first: ImageSource | None = None
        self.second: ImageSource | None = None
        self.comparator = comparator
        self._flight = SingleFlight()

    def set_first(self, source: ImageSource) -> None:
        self.first = source

    def set_second(self, source: ImageSource) -> None:
        self.second = source

    def has_both(self) -> bool:
        return self.first is not None and self.second is not None

    def compare(self, config: ComparisonConfig) -> ComparisonOutcome:
        """Compare the current pair.

        Raises:
            ValueError: If either side has not been set.
            ComparisonInProgress: If another comparison is running.
            DecodeError: If either image cannot be decoded.
        """
        if self.first is None or self.second is None:
            raise ValueError("both images must be set before comparing")
        return self._flight.run(
            compare_sources, self.first, self.second, config, self.comparator
        )

    def auto_compare(self, config: ComparisonConfig) -> ComparisonOutcome | None:
        """Compare if both sides are present, otherwise do nothing."""
        if not self.has_both():
            return None
        return self.compare(config)
