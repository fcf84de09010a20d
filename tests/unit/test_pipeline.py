"""Tests for the end-to-end comparison pipeline."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import pytest

from conftest import png_bytes, solid, with_block
from imgcmp.classify import SEVERITY_CATEGORIES
from imgcmp.config import ComparisonConfig
from imgcmp.engine import DiffRaster, ExactComparator
from imgcmp.errors import ComparisonInProgress, DecodeError
from imgcmp.normalize import NormalizedRaster
from imgcmp.pipeline import ComparisonSession, SingleFlight, compare_sources

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)
RED = (255, 0, 0, 255)


class TestCompareSources:
    def test_identical_is_first_category(self, make_config: Any) -> None:
        out = compare_sources(png_bytes(RED), png_bytes(RED), make_config(maxDim=4))
        assert out.result.mismatched_pixels == 0
        assert out.result.total_pixels == 16
        assert out.result.diff_percent == 0.0
        assert out.result.category is SEVERITY_CATEGORIES[0]

    def test_self_copy_after_resampling(self, make_config: Any) -> None:
        data = with_block(BLACK, WHITE, 33, size=25)
        out = compare_sources(data, bytes(data), make_config(maxDim=16))
        assert out.result.mismatched_pixels == 0

    def test_black_vs_white_is_last_category(self, make_config: Any) -> None:
        out = compare_sources(png_bytes(BLACK), png_bytes(WHITE), make_config(maxDim=8))
        assert out.result.mismatched_pixels == out.result.total_pixels == 64
        assert out.result.diff_percent == 100.0
        assert out.result.category is SEVERITY_CATEGORIES[-1]

    def test_different_source_sizes(self, make_config: Any) -> None:
        out = compare_sources(
            png_bytes(RED, size=(300, 20)), png_bytes(RED, size=(7, 90)), make_config(maxDim=12)
        )
        assert out.result.mismatched_pixels == 0
        assert (out.diff.width, out.diff.height) == (12, 12)
        assert len(out.diff.data) == 12 * 12 * 4

    def test_nineteen_percent(self, make_config: Any) -> None:
        out = compare_sources(
            png_bytes(BLACK, size=(10, 10)),
            with_block(BLACK, WHITE, 19),
            make_config(maxDim=10),
            ExactComparator(),
        )
        assert out.result.diff_percent == 19.0
        assert out.result.category.upper_bound == 20

    def test_twenty_percent_goes_to_next(self, make_config: Any) -> None:
        out = compare_sources(
            png_bytes(BLACK, size=(10, 10)),
            with_block(BLACK, WHITE, 20),
            make_config(maxDim=10),
            ExactComparator(),
        )
        assert out.result.diff_percent == 20.0
        assert out.result.category.upper_bound == 40

    def test_decode_error_aborts(self, make_config: Any) -> None:
        with pytest.raises(DecodeError):
            compare_sources(png_bytes(RED), b"garbage", make_config())

    def test_paths(self, tmp_path: Path, make_config: Any) -> None:
        a = solid(tmp_path, "a.png", RED)
        b = solid(tmp_path, "b.png", RED)
        assert compare_sources(a, b, make_config(maxDim=4)).result.mismatched_pixels == 0


class TestSingleFlight:
    def test_returns_value(self) -> None:
        assert SingleFlight().run(lambda x: x + 1, 1) == 2

    def test_rejects_overlap(self) -> None:
        flight = SingleFlight()
        with pytest.raises(ComparisonInProgress):
            flight.run(flight.run, lambda: None)
        assert not flight.busy

    def test_rejects_concurrent_caller(self) -> None:
        flight = SingleFlight()
        started = threading.Event()
        release = threading.Event()

        def slow() -> str:
            started.set()
            release.wait(5)
            return "done"

        results: list[str] = []
        t = threading.Thread(target=lambda: results.append(flight.run(slow)))
        t.start()
        started.wait(5)
        try:
            assert flight.busy
            with pytest.raises(ComparisonInProgress):
                flight.run(lambda: "second")
        finally:
            release.set()
            t.join()
        assert results == ["done"]

    def test_released_after_error(self) -> None:
        flight = SingleFlight()

        def boom() -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            flight.run(boom)
        assert flight.run(lambda: 1) == 1


class TestComparisonSession:
    def test_auto_compare_needs_both(self, make_config: Any) -> None:
        session = ComparisonSession()
        session.set_first(png_bytes(RED))
        assert not session.has_both()
        assert session.auto_compare(make_config(maxDim=4)) is None

    def test_compare_without_images(self, make_config: Any) -> None:
        with pytest.raises(ValueError, match="both images"):
            ComparisonSession().compare(make_config())

    def test_sides_replaced_independently(self, make_config: Any) -> None:
        cfg = make_config(maxDim=4)
        session = ComparisonSession()
        session.set_first(png_bytes(BLACK))
        session.set_second(png_bytes(BLACK))
        first = session.auto_compare(cfg)
        assert first is not None and first.result.mismatched_pixels == 0
        session.set_second(png_bytes(WHITE))
        second = session.auto_compare(cfg)
        assert second is not None and second.result.mismatched_pixels == 16

    def test_uses_given_comparator(self, make_config: Any) -> None:
        session = ComparisonSession(ExactComparator())
        session.set_first(png_bytes((10, 10, 10, 255)))
        session.set_second(png_bytes((11, 10, 10, 255)))
        out = session.compare(make_config(maxDim=4))
        assert out.result.mismatched_pixels == 16

    def test_config_change_between_runs(self, make_config: Any) -> None:
        session = ComparisonSession()
        session.set_first(png_bytes(RED))
        session.set_second(png_bytes(RED))
        assert session.compare(make_config(maxDim=4)).result.total_pixels == 16
        assert session.compare(make_config(maxDim=6)).result.total_pixels == 36

    def test_overlapping_compare_rejected(self, make_config: Any) -> None:
        cfg = make_config(maxDim=4)
        started = threading.Event()
        release = threading.Event()

        class _Blocking(ExactComparator):
            def compare(
                self, a: NormalizedRaster, b: NormalizedRaster, config: ComparisonConfig
            ) -> tuple[int, DiffRaster]:
                started.set()
                release.wait(5)
                return super().compare(a, b, config)

        session = ComparisonSession(_Blocking())
        session.set_first(png_bytes(BLACK))
        session.set_second(png_bytes(WHITE))

        outcomes: list[Any] = []
        t = threading.Thread(target=lambda: outcomes.append(session.compare(cfg)))
        t.start()
        started.wait(5)
        try:
            with pytest.raises(ComparisonInProgress):
                session.compare(cfg)
        finally:
            release.set()
            t.join()
        assert outcomes[0].result.mismatched_pixels == 16
        assert session.compare(cfg).result.mismatched_pixels == 16
