"""imgcmp compare command -- classify the difference between two images."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click

from imgcmp.classify import SEVERITY_CATEGORIES, category_rank
from imgcmp.commands._options import comparison_options
from imgcmp.config import ComparisonConfig
from imgcmp.engine import ExactComparator, PixelmatchComparator
from imgcmp.errors import DecodeError
from imgcmp.formatters.json_fmt import write_json
from imgcmp.formatters.kv import format_kv
from imgcmp.options_file import dump_options
from imgcmp.pipeline import ComparisonOutcome, ComparisonSession

_LABELS = [c.label for c in SEVERITY_CATEGORIES]


def _outcome_dict(
    outcome: ComparisonOutcome,
    config: ComparisonConfig,
    diff_image: Path | None,
) -> dict[str, Any]:
    r = outcome.result
    return {
        "mismatched_pixels": r.mismatched_pixels,
        "matching_pixels": r.matching_pixels,
        "total_pixels": r.total_pixels,
        "diff_percent": r.diff_percent,
        "category": r.category.label,
        "description": r.category.description,
        "color": r.category.color,
        "icon": r.category.icon,
        "diff_image": str(diff_image) if diff_image else None,
        "options": dump_options(config),
    }


def _render_text(outcome: ComparisonOutcome, diff_image: Path | None) -> None:
    r = outcome.result
    click.echo(f"{r.category.icon} {r.category.label}")
    click.echo(
        format_kv(
            {
                "different pixels": r.mismatched_pixels,
                "matching pixels": r.matching_pixels,
                "total pixels": r.total_pixels,
                "difference": f"{r.diff_percent:.2f}%",
            },
            indent=2,
        )
    )
    click.echo(f"  {r.category.description}")
    if diff_image is not None:
        click.echo(f"  diff image: {diff_image}")


@click.command("compare")
@click.argument("image_a", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("image_b", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--exact", is_flag=True, help="Count any channel difference; skip perceptual matching.")
@click.option(
    "--diff-output",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the diff visualization PNG here.",
)
@click.option("--json", "use_json", is_flag=True, help="JSON output.")
@click.option(
    "--fail-above",
    default=None,
    type=click.Choice(_LABELS, case_sensitive=False),
    help="Exit 1 if the result is worse than this category.",
)
@comparison_options
def compare_cmd(
    image_a: Path,
    image_b: Path,
    exact: bool,
    diff_output: Path | None,
    use_json: bool,
    fail_above: str | None,
    config: ComparisonConfig,
) -> None:
    """Compare two images and classify how different they are.

    Both images are resampled to the same MAX_DIM x MAX_DIM grid before
    comparison. Exit 0 on success, 1 if --fail-above is exceeded, 2 on error.
    """
    session = ComparisonSession(ExactComparator() if exact else PixelmatchComparator())
    session.set_first(image_a)
    session.set_second(image_b)
    try:
        outcome = session.compare(config)
    except DecodeError as exc:
        click.echo(f"error: {exc}", err=True)
        sys.exit(2)

    diff_image: Path | None = None
    if diff_output is not None:
        try:
            outcome.diff.save(diff_output)
        except OSError as exc:
            click.echo(f"error: cannot write diff image: {exc}", err=True)
            sys.exit(2)
        diff_image = diff_output

    if use_json:
        write_json(_outcome_dict(outcome, config, diff_image))
    else:
        _render_text(outcome, diff_image)

    if fail_above is not None:
        if category_rank(outcome.result.category.label) > category_rank(fail_above):
            sys.exit(1)
