"""Key-value pair formatting (aligned columns)."""

from __future__ import annotations

import sys
from typing import Any, TextIO


def format_kv(data: dict[str, Any], *, indent: int = 0) -> str:
    """Format a dict as aligned ``key: value`` lines.

    None and empty-string values render as ``-``; booleans as ``yes``/``no``.
    """
    if not data:
        return ""
    width = max(len(str(k)) for k in data) + 2
    pad = " " * indent
    lines: list[str] = []
    for k, v in data.items():
        if v is None or v == "":
            v = "-"
        elif isinstance(v, bool):
            v = "yes" if v else "no"
        lines.append(f"{pad}{str(k) + ':':<{width}}{v}")
    return "\n".join(lines)


def write_kv(data: dict[str, Any], out: TextIO | None = None, *, indent: int = 0) -> None:
    """Format a dict as aligned key-value pairs and write to a stream."""
    dest = out or sys.stdout
    dest.write(format_kv(data, indent=indent) + "\n")
