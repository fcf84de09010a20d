"""Persisted comparison options: a flat JSON record keyed by setting name."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from imgcmp.config import SETTING_KEYS, ComparisonConfig, rgb_to_hex

log = logging.getLogger(__name__)


def load_options(path: Path) -> dict[str, Any]:
    """Read raw settings from *path*.

    A missing, unreadable or malformed file yields an empty mapping so that
    defaults apply. Unknown keys are dropped; values are returned unparsed.
    """
    if not path.exists():
        log.warning("options file not found: %s", path)
        return {}
    try:
        data = json.loads(path.read_text())
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        log.warning("ignoring unreadable options file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        log.warning("ignoring options file %s: top level is not an object", path)
        return {}
    return {k: v for k, v in data.items() if k in SETTING_KEYS}


def merge_settings(*layers: dict[str, Any]) -> dict[str, Any]:
    """Merge raw settings layers; later layers win and ``None`` values are skipped."""
    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update({k: v for k, v in layer.items() if v is not None})
    return merged


def dump_options(config: ComparisonConfig) -> dict[str, Any]:
    """Return *config* in the persisted layout (colors as ``#rrggbb``)."""
    return {
        "maxDim": config.sample_dimension,
        "threshold": config.color_threshold,
        "includeAA": config.include_anti_aliasing,
        "alpha": config.blend_alpha,
        "aaColor": rgb_to_hex(config.anti_alias_color),
        "diffColor": rgb_to_hex(config.diff_color),
        "diffColorAlt": rgb_to_hex(config.diff_color_alt),
        "diffMask": config.diff_mask_only,
    }
