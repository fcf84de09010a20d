"""Shared comparison-settings options for imgcmp commands."""

from __future__ import annotations

import functools
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from imgcmp.config import DEFAULT_SETTINGS, ComparisonConfig, resolve_config
from imgcmp.options_file import load_options, merge_settings

# CLI parameter name -> persisted setting key
_FLAG_KEYS = {
    "max_dim": "maxDim",
    "threshold": "threshold",
    "include_aa": "includeAA",
    "alpha": "alpha",
    "aa_color": "aaColor",
    "diff_color": "diffColor",
    "diff_color_alt": "diffColorAlt",
    "diff_mask": "diffMask",
}


def build_config(options_file: Path | None, flags: dict[str, Any]) -> ComparisonConfig:
    """Resolve defaults < options file < command-line flags into a config."""
    from_file = load_options(options_file) if options_file is not None else {}
    from_flags = {_FLAG_KEYS[name]: value for name, value in flags.items()}
    return resolve_config(merge_settings(DEFAULT_SETTINGS, from_file, from_flags))


def comparison_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the comparison settings options; passes ``config`` to *fn*."""

    @click.option(
        "--options-file",
        default=None,
        type=click.Path(dir_okay=False, path_type=Path),
        help="JSON file with saved settings (maxDim, threshold, ...).",
    )
    @click.option("--max-dim", default=None, metavar="INT", help="Sampling grid size (N x N).")
    @click.option("--threshold", default=None, metavar="FLOAT", help="Color threshold 0-1.")
    @click.option("--include-aa/--no-include-aa", default=None, help="Count anti-aliased pixels.")
    @click.option("--alpha", default=None, metavar="FLOAT", help="Opacity of unchanged pixels 0-1.")
    @click.option("--aa-color", default=None, metavar="HEX", help="Anti-aliased pixel color.")
    @click.option("--diff-color", default=None, metavar="HEX", help="Mismatched pixel color.")
    @click.option("--diff-color-alt", default=None, metavar="HEX", help="Color for darker pixels.")
    @click.option("--diff-mask/--no-diff-mask", default=None, help="Draw the diff on transparency.")
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        options_file = kwargs.pop("options_file")
        flags = {name: kwargs.pop(name) for name in _FLAG_KEYS}
        kwargs["config"] = build_config(options_file, flags)
        return fn(*args, **kwargs)

    return wrapper
