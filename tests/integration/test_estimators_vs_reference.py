"""Integration tests comparing the streaming estimators to exact references.

Every builder is fed the same stream; estimates are lined up in a pandas
DataFrame, checked against nearest rank, and plotted to test_output/ for
inspection.
"""

from pathlib import Path

import pandas as pd
import pytest

from livepercentiles import (
    CKMSSketch,
    CombinedPsquareSinglePercentile,
    LinearInterpolationBuilder,
    NearestRankBuilder,
    Precision,
    PsquareHistogram,
    PsquareSinglePercentile,
)
from livepercentiles.analysis import compare, feed, mean_squared_errors, plot_comparison

DECILES = [10, 20, 30, 40, 50, 60, 70, 80, 90]
TAIL_PERCENTILES = [80, 90, 99, 99.9]


def _builders(percentiles):
    return {
        "nearest rank": NearestRankBuilder(percentiles),
        "linear interpolation": LinearInterpolationBuilder(percentiles),
        "P² single (fast)": CombinedPsquareSinglePercentile(
            percentiles, Precision.LESS_PRECISE_AND_FASTER
        ),
        "P² single (normal)": CombinedPsquareSinglePercentile(percentiles),
        "CKMS": CKMSSketch(0.0001, percentiles),
    }


class TestDecilesOnUniformStream:
    """All builders agree on the deciles of a uniform stream."""

    def test_estimates_close_to_reference(self, rng, test_output_dir: Path):
        builders = _builders(DECILES)
        builders["P² histogram"] = PsquareHistogram(10)

        count = feed(builders.values(), (rng.uniform(0, 100) for _ in range(50_000)))
        frame = compare(builders)

        assert count == 50_000
        assert list(frame.index) == DECILES
        assert not frame.isna().any().any()

        for name in frame.columns:
            diff = (frame[name] - frame["nearest rank"]).abs()
            assert (diff < 1.5).all(), f"{name} deviates: {diff.to_dict()}"

        errors = mean_squared_errors(frame, reference="nearest rank")
        assert errors["nearest rank"] == 0
        assert errors["CKMS"] < 0.05

        frame.to_csv(test_output_dir / "deciles.csv")
        plot_comparison(frame, test_output_dir / "deciles.png", title="Uniform stream deciles")
        assert (test_output_dir / "deciles.png").exists()


class TestTailPercentilesOnLatencyStream:
    """Tail percentiles of an exponential latency-like stream."""

    def test_tail_estimates(self, rng):
        builders = _builders(TAIL_PERCENTILES)

        feed(builders.values(), (rng.expovariate(1 / 80) for _ in range(20_000)))
        frame = compare(builders)

        reference = frame["nearest rank"]
        assert reference.is_monotonic_increasing

        relative = ((frame["CKMS"] - reference) / reference).abs()
        assert (relative < 0.1).all(), f"CKMS deviates: {relative.to_dict()}"

        # P² needs more than 20 tail observations to settle on 99.9
        body = frame.loc[[80, 90, 99]]
        relative = ((body["P² single (normal)"] - body["nearest rank"]) / body["nearest rank"]).abs()
        assert (relative < 0.15).all(), f"P² deviates: {relative.to_dict()}"


class TestComparisonHelpers:
    """Tests for the DataFrame helpers themselves."""

    def test_missing_estimates_are_nan(self):
        """Builders that are still warming up leave gaps."""
        builders = {
            "nearest rank": NearestRankBuilder([50]),
            "P² histogram": PsquareHistogram(4),
        }
        feed(builders.values(), [3.0, 1.0, 2.0])

        frame = compare(builders)

        assert frame.loc[50, "nearest rank"] == 2.0
        assert pd.isna(frame.loc[50, "P² histogram"])

    def test_unknown_reference_column(self):
        frame = pd.DataFrame({"a": [1.0]}, index=[50])

        with pytest.raises(KeyError, match="Unknown reference"):
            mean_squared_errors(frame, reference="b")

    def test_partial_column_has_no_error(self):
        """A builder missing some ranks is not scored on the rest."""
        frame = pd.DataFrame(
            {"reference": [1.0, 2.0], "partial": [1.0, float("nan")], "full": [2.0, 2.0]},
            index=[25, 75],
        )

        errors = mean_squared_errors(frame, reference="reference")

        assert errors["reference"] == 0
        assert errors["full"] == 0.5
        assert pd.isna(errors["partial"])

    def test_plot_leaves_backend_alone(self, tmp_path):
        """Plotting does not switch the process-wide matplotlib backend."""
        import matplotlib

        previous = matplotlib.get_backend()
        matplotlib.use("svg")
        try:
            frame = pd.DataFrame({"a": [1.0, 2.0], "b": [1.5, 2.5]}, index=[25, 75])

            path = plot_comparison(frame, tmp_path / "plots" / "comparison.png")

            assert path.exists()
            assert matplotlib.get_backend() == "svg"
        finally:
            matplotlib.use(previous)


class TestMillionValueStream:
    """P² memory stays fixed over a long stream."""

    def test_marker_count_unchanged_after_one_million_values(self, rng):
        histogram = PsquareHistogram()
        single = PsquareSinglePercentile(90)

        histogram.add_value(rng.random())
        for _ in range(10):
            value = rng.random() * 100
            histogram.add_value(value)
            single.add_value(value)
        histogram_markers, single_markers = histogram.marker_count, single.marker_count
        histogram_memory, single_memory = histogram.memory_bytes, single.memory_bytes

        for _ in range(1_000_000):
            value = rng.random() * 100
            histogram.add_value(value)
            single.add_value(value)

        assert histogram_markers == histogram.marker_count == 11
        assert single_markers == single.marker_count == 7
        assert histogram.memory_bytes == histogram_memory
        assert single.memory_bytes == single_memory

        for i, p in enumerate(histogram.get_percentiles(), start=1):
            assert p.value == pytest.approx(10 * i, abs=0.5)
        assert single.get_percentiles()[0].value == pytest.approx(90, abs=0.5)
