"""imgcmp config command -- show the settings a comparison would use."""

from __future__ import annotations

import click

from imgcmp.commands._options import comparison_options
from imgcmp.config import ComparisonConfig
from imgcmp.formatters.json_fmt import write_json
from imgcmp.formatters.kv import write_kv
from imgcmp.options_file import dump_options


@click.command("config")
@click.option("--json", "use_json", is_flag=True, help="JSON output (usable as --options-file).")
@comparison_options
def config_cmd(use_json: bool, config: ComparisonConfig) -> None:
    """Print the resolved comparison settings.

    Invalid values are replaced by defaults, exactly as for ``compare``.
    """
    options = dump_options(config)
    if use_json:
        write_json(options)
    else:
        write_kv(options)
