from __future__ import annotations

import logging

import click

from imgcmp import __version__
from imgcmp.commands.categories import categories_cmd
from imgcmp.commands.compare import compare_cmd
from imgcmp.commands.config_cmd import config_cmd


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="imgcmp")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging on stderr.")
def main(verbose: bool) -> None:
    """imgcmp: compare two images and classify the difference."""
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("imgcmp").setLevel(logging.DEBUG if verbose else logging.WARNING)


main.add_command(compare_cmd, name="compare")
main.add_command(categories_cmd, name="categories")
main.add_command(config_cmd, name="config")


if __name__ == "__main__":
    main()
