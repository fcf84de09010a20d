"""imgcmp categories command -- print the severity table."""

from __future__ import annotations

from dataclasses import asdict

import click

from imgcmp.classify import SEVERITY_CATEGORIES
from imgcmp.formatters.json_fmt import write_json
from imgcmp.formatters.tsv import write_tsv

_COLUMNS = {
    "BELOW": "upper_bound",
    "LABEL": "label",
    "COLOR": "color",
    "ICON": "icon",
    "DESCRIPTION": "description",
}


@click.command("categories")
@click.option("--no-header", is_flag=True, help="Omit TSV header")
@click.option("--json", "use_json", is_flag=True, help="JSON output")
def categories_cmd(no_header: bool, use_json: bool) -> None:
    """List severity categories in ascending order of difference."""
    records = [asdict(c) for c in SEVERITY_CATEGORIES]
    if use_json:
        write_json(records)
        return
    write_tsv(records, _COLUMNS, no_header=no_header)
