"""Comparison settings: defaults, parsing and resolution into ComparisonConfig."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

log = logging.getLogger(__name__)

RGB = tuple[int, int, int]

WHITE: RGB = (255, 255, 255)

# Comparison cost and memory grow with N^2; larger requests are clamped.
MAX_SAMPLE_DIMENSION = 1024

DEFAULT_SETTINGS: dict[str, Any] = {
    "maxDim": 128,
    "threshold": 0.3,
    "includeAA": False,
    "alpha": 0.1,
    "aaColor": "#ffff00",
    "diffColor": "#ff0000",
    "diffColorAlt": "#00ff00",
    "diffMask": False,
}

SETTING_KEYS = tuple(DEFAULT_SETTINGS)

_HEX_RE = re.compile(r"#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})", re.IGNORECASE)
_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


@dataclass(frozen=True)
class ComparisonConfig:
    """Validated settings for a single comparison run."""

    sample_dimension: int
    color_threshold: float
    include_anti_aliasing: bool
    blend_alpha: float
    anti_alias_color: RGB
    diff_color: RGB
    diff_color_alt: RGB
    diff_mask_only: bool

    @property
    def total_pixels(self) -> int:
        return self.sample_dimension * self.sample_dimension


def hex_to_rgb(value: Any) -> RGB:
    """Parse ``#RRGGBB`` (leading ``#`` optional, any case) into an RGB triple.

    Malformed input yields white ``(255, 255, 255)``.
    """
    if not isinstance(value, str):
        return WHITE
    m = _HEX_RE.fullmatch(value)
    if m is None:
        return WHITE
    return (int(m.group(1), 16), int(m.group(2), 16), int(m.group(3), 16))


def rgb_to_hex(rgb: RGB) -> str:
    """Format an RGB triple as a lowercase ``#rrggbb`` string."""
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def _parse_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        f = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(f) or not f.is_integer():
        return None
    return int(f)


def _parse_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        f = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _parse_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        s = value.strip().lower()
        if s in _TRUE:
            return True
        if s in _FALSE:
            return False
    return None


def _fallback(key: str, value: Any, default: Any) -> Any:
    log.warning("invalid setting %s=%r, using default %r", key, value, default)
    return default


def _resolve_dimension(raw: Any, default: int) -> int:
    n = _parse_int(raw)
    if n is None or n <= 0:
        return int(_fallback("maxDim", raw, default))
    if n > MAX_SAMPLE_DIMENSION:
        log.warning("maxDim=%d exceeds %d, clamping", n, MAX_SAMPLE_DIMENSION)
        return MAX_SAMPLE_DIMENSION
    return n


def _resolve_unit(key: str, raw: Any, default: float) -> float:
    f = _parse_float(raw)
    if f is None:
        return float(_fallback(key, raw, default))
    if f < 0.0 or f > 1.0:
        clamped = min(max(f, 0.0), 1.0)
        log.warning("%s=%r out of range [0, 1], clamping to %r", key, raw, clamped)
        return clamped
    return f


def _resolve_flag(key: str, raw: Any, default: bool) -> bool:
    b = _parse_bool(raw)
    if b is None:
        return bool(_fallback(key, raw, default))
    return b


def _is_channel(c: Any) -> bool:
    return isinstance(c, int) and not isinstance(c, bool) and 0 <= c <= 255


def _resolve_color(key: str, raw: Any) -> RGB:
    if isinstance(raw, (list, tuple)) and len(raw) == 3 and all(_is_channel(c) for c in raw):
        return (raw[0], raw[1], raw[2])
    if isinstance(raw, str) and _HEX_RE.fullmatch(raw):
        return hex_to_rgb(raw)
    log.warning("invalid color %s=%r, using white", key, raw)
    return WHITE


def resolve_config(
    raw: Mapping[str, Any],
    defaults: Mapping[str, Any] = DEFAULT_SETTINGS,
) -> ComparisonConfig:
    """Build a ComparisonConfig from raw user-facing settings.

    Missing keys take the value from *defaults*. Unparseable or non-finite
    numbers fall back to the default field, malformed colors resolve to white.
    Every substitution is logged as a warning; resolution itself never fails.

    Args:
        raw: Settings keyed by the persisted names (``maxDim``, ``threshold``...).
        defaults: Settings used for missing or invalid values. Keys absent here
            come from DEFAULT_SETTINGS.

    Returns:
        The resolved, immutable configuration.
    """
    base = {**DEFAULT_SETTINGS, **defaults}
    merged = {**base, **{k: v for k, v in raw.items() if k in SETTING_KEYS and v is not None}}

    return ComparisonConfig(
        sample_dimension=_resolve_dimension(merged["maxDim"], base["maxDim"]),
        color_threshold=_resolve_unit("threshold", merged["threshold"], base["threshold"]),
        include_anti_aliasing=_resolve_flag("includeAA", merged["includeAA"], base["includeAA"]),
        blend_alpha=_resolve_unit("alpha", merged["alpha"], base["alpha"]),
        anti_alias_color=_resolve_color("aaColor", merged["aaColor"]),
        diff_color=_resolve_color("diffColor", merged["diffColor"]),
        diff_color_alt=_resolve_color("diffColorAlt", merged["diffColorAlt"]),
        diff_mask_only=_resolve_flag("diffMask", merged["diffMask"], base["diffMask"]),
    )
