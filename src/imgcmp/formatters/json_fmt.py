"""JSON output formatter for imgcmp."""

from __future__ import annotations

import json
import math
import sys
from typing import Any, TextIO


def _finite(data: Any) -> Any:
    """Replace non-finite floats (the open-ended severity bound) with None."""
    if isinstance(data, float) and not math.isfinite(data):
        return None
    if isinstance(data, dict):
        return {k: _finite(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [_finite(v) for v in data]
    return data


def write_json(data: Any, *, out: TextIO | None = None, indent: int = 2) -> None:
    """Write data as formatted JSON to the given output stream."""
    dest = out or sys.stdout
    dest.write(json.dumps(_finite(data), default=str, indent=indent, ensure_ascii=False) + "\n")
