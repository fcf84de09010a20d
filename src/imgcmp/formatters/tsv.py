"""TSV output formatter for imgcmp.

Records are written one per line under a header of column titles. Floats are
printed in shortest form, so category bounds read ``20`` and ``inf``.
"""

from __future__ import annotations

import math
import sys
from collections.abc import Iterable, Mapping
from typing import Any, TextIO


def format_field(value: Any) -> str:
    """Render one cell.

    None, NaN and empty strings become '-'; bools become yes/no; tabs and
    newlines in text are backslash-escaped.
    """
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float):
        if math.isnan(value):
            return "-"
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        return f"{value:g}"
    s = str(value)
    if not s:
        return "-"
    return s.replace("\t", "\\t").replace("\n", "\\n")


def write_tsv(
    records: Iterable[Mapping[str, Any]],
    columns: Mapping[str, str],
    *,
    no_header: bool = False,
    out: TextIO | None = None,
) -> None:
    """Write *records* as TSV (stdout by default).

    Args:
        records: One mapping per row.
        columns: Header title -> record key, in output order.
        no_header: Skip the header row.
        out: Output stream.
    """
    dest = out or sys.stdout
    if not no_header:
        dest.write("\t".join(columns) + "\n")
    for record in records:
        dest.write("\t".join(format_field(record.get(key)) for key in columns.values()) + "\n")
