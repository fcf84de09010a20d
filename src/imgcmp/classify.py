"""Aggregate mismatch counts into a percentage and a severity category."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class SeverityCategory:
    """One band of the severity table; covers percentages below ``upper_bound``."""

    upper_bound: float
    label: str
    color: str
    icon: str
    description: str


@dataclass(frozen=True)
class ComparisonResult:
    """Summary statistics for one comparison run."""

    mismatched_pixels: int
    total_pixels: int
    diff_percent: float
    category: SeverityCategory

    @property
    def matching_pixels(self) -> int:
        return self.total_pixels - self.mismatched_pixels


def validate_categories(categories: Sequence[SeverityCategory]) -> None:
    """Check that *categories* is a usable severity table.

    Bounds must be strictly increasing, start above zero and end with an
    infinite entry so that every percentage maps to exactly one category.

    Raises:
        ValueError: If the table is malformed.
    """
    if not categories:
        raise ValueError("severity table is empty")
    bounds = [c.upper_bound for c in categories]
    if bounds[0] <= 0:
        raise ValueError(f"first severity bound must be > 0, got {bounds[0]}")
    for lo, hi in zip(bounds, bounds[1:]):
        if not lo < hi:
            raise ValueError(f"severity bounds not strictly increasing: {lo} >= {hi}")
    if not math.isinf(bounds[-1]):
        raise ValueError(f"last severity bound must be infinite, got {bounds[-1]}")


SEVERITY_CATEGORIES: tuple[SeverityCategory, ...] = (
    SeverityCategory(20, "VERY_SIMILAR", "#28a745", "✅", "Images are nearly identical"),
    SeverityCategory(40, "SIMILAR", "#17a2b8", "🔍", "Images are very similar"),
    SeverityCategory(
        60, "SOMEWHAT_DIFFERENT", "#ffc107", "⚠️", "Images have noticeable differences"
    ),
    SeverityCategory(
        math.inf, "VERY_DIFFERENT", "#dc3545", "❌", "Images are significantly different"
    ),
)

validate_categories(SEVERITY_CATEGORIES)


def diff_percent(mismatched: int, total: int) -> float:
    """Return ``100 * mismatched / total``.

    Raises:
        ValueError: If total is not positive or mismatched is outside [0, total].
    """
    if total <= 0:
        raise ValueError(f"total pixel count must be positive, got {total}")
    if not 0 <= mismatched <= total:
        raise ValueError(f"mismatched count {mismatched} outside [0, {total}]")
    return 100.0 * mismatched / total


def category_for(
    percent: float,
    categories: Sequence[SeverityCategory] = SEVERITY_CATEGORIES,
) -> SeverityCategory:
    """Pick the first category whose bound strictly exceeds *percent*.

    A percentage equal to a bound belongs to the next category.
    """
    for category in categories:
        if percent < category.upper_bound:
            return category
    return categories[-1]


def category_rank(label: str, categories: Sequence[SeverityCategory] = SEVERITY_CATEGORIES) -> int:
    """Return the position of the category named *label* (case-insensitive).

    Raises:
        KeyError: If no category has that label.
    """
    wanted = label.strip().upper()
    for i, category in enumerate(categories):
        if category.label == wanted:
            return i
    raise KeyError(label)


def classify(
    mismatched: int,
    total: int,
    categories: Sequence[SeverityCategory] = SEVERITY_CATEGORIES,
) -> ComparisonResult:
    """Turn raw pixel counts into a ComparisonResult."""
    percent = diff_percent(mismatched, total)
    return ComparisonResult(
        mismatched_pixels=mismatched,
        total_pixels=total,
        diff_percent=percent,
        category=category_for(percent, categories),
    )
