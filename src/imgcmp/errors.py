"""Exception types raised by the comparison pipeline."""

from __future__ import annotations


class DecodeError(Exception):
    """A source image could not be decoded."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"cannot decode {source}: {reason}")
        self.source = source
        self.reason = reason


class PreconditionViolation(AssertionError):
    """Rasters of different shape reached the difference engine."""


class ComparisonInProgress(RuntimeError):
    """A comparison was requested while another one is still running."""
