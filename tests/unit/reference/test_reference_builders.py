"""Tests for the exact reference builders."""

import math
import random

import pytest

from livepercentiles import DEFAULT_PERCENTILES, InvalidConfigurationError
from livepercentiles.reference import LinearInterpolationBuilder, NearestRankBuilder
from livepercentiles.sketching import Percentile


def _feed(builder, values, seed=7):
    values = list(values)
    random.Random(seed).shuffle(values)
    for v in values:
        builder.add_value(v)
    return builder


def _as_dict(percentiles):
    return {p.rank: p.value for p in percentiles}


class TestNearestRankBuilder:
    """Tests for the nearest-rank method."""

    @pytest.mark.parametrize(
        ("percentiles", "values", "expected"),
        [
            pytest.param(
                DEFAULT_PERCENTILES,
                range(1, 11),
                {10: 1, 20: 2, 30: 3, 40: 4, 50: 5, 60: 6, 70: 7, 80: 8, 90: 9},
                id="basic",
            ),
            pytest.param(
                [30, 40, 50, 100],
                [15, 20, 35, 40, 50],
                {30: 20, 40: 20, 50: 35, 100: 50},
                id="wikipedia-1",
            ),
            pytest.param(
                [25, 50, 75, 100],
                [3, 6, 7, 8, 8, 10, 13, 15, 16, 20],
                {25: 7, 50: 8, 75: 15, 100: 20},
                id="wikipedia-2",
            ),
            pytest.param(
                [25, 50, 75, 100],
                [3, 6, 7, 8, 8, 9, 10, 13, 15, 16, 20],
                {25: 7, 50: 9, 75: 15, 100: 20},
                id="wikipedia-3",
            ),
            pytest.param([-5], range(1, 11), {-5: 1}, id="negative"),
            pytest.param([0.2], range(1, 11), {0.2: 1}, id="below-one"),
            pytest.param([0], range(1, 11), {0: 1}, id="zero"),
            pytest.param([70], [1], {70: 1}, id="one-value"),
            pytest.param([50], [1, 2], {50: 1}, id="two-values"),
        ],
    )
    def test_known_results(self, percentiles, values, expected):
        """Nearest-rank results match the worked examples."""
        builder = _feed(NearestRankBuilder(percentiles), values)

        assert _as_dict(builder.get_percentiles()) == expected

    def test_more_than_one_hundred_percentiles(self):
        """Fractional percentiles above 99 round up to the maximum."""
        percentiles = [float(i) for i in range(1, 100)] + [99.9, 99.99]
        builder = _feed(NearestRankBuilder(percentiles), range(1, 101))

        result = builder.get_percentiles()

        assert result[:99] == [Percentile(p, p) for p in range(1, 100)]
        assert result[99:] == [Percentile(99.9, 100), Percentile(99.99, 100)]

    def test_no_data(self):
        """An empty builder reports nothing."""
        assert NearestRankBuilder([50]).get_percentiles() == []

    def test_keeps_every_value(self):
        """item_count counts stored observations."""
        builder = _feed(NearestRankBuilder(), range(1000))

        assert builder.item_count == 1000


class TestLinearInterpolationBuilder:
    """Tests for linear interpolation between closest ranks."""

    @pytest.mark.parametrize(
        ("percentiles", "values", "expected"),
        [
            pytest.param(
                DEFAULT_PERCENTILES,
                range(1, 11),
                {10: 1.5, 20: 2.5, 30: 3.5, 40: 4.5, 50: 5.5, 60: 6.5, 70: 7.5, 80: 8.5, 90: 9.5},
                id="basic",
            ),
            pytest.param(
                [5, 30, 40, 95],
                [15, 20, 35, 40, 50],
                {5: 15, 30: 20, 40: 27.5, 95: 50},
                id="wikipedia",
            ),
            pytest.param([-5], range(1, 11), {-5: 1}, id="negative"),
            pytest.param([0.2], range(1, 11), {0.2: 1}, id="below-one"),
            pytest.param([70], [1], {70: 1}, id="one-value"),
            pytest.param([50], [1, 2], {50: 1.5}, id="two-values"),
            pytest.param([100, 120], range(1, 11), {100: 10, 120: 10}, id="above-hundred"),
        ],
    )
    def test_known_results(self, percentiles, values, expected):
        """Interpolated results match the worked examples."""
        builder = _feed(LinearInterpolationBuilder(percentiles), values)

        result = _as_dict(builder.get_percentiles())

        assert result.keys() == expected.keys()
        for rank, value in expected.items():
            assert result[rank] == pytest.approx(value)

    def test_more_than_one_hundred_percentiles(self):
        """Every integer percentile of 1..100 sits half a unit above its rank."""
        percentiles = [float(i) for i in range(1, 100)] + [99.9, 99.99]
        builder = _feed(LinearInterpolationBuilder(percentiles), range(1, 101))

        result = builder.get_percentiles()

        for p in result[:99]:
            assert p.value == pytest.approx(p.rank + 0.5)
        assert [p.value for p in result[99:]] == [100, 100]

    def test_no_data(self):
        """An empty builder reports nothing."""
        assert LinearInterpolationBuilder([50]).get_percentiles() == []

    def test_rejects_non_finite_values(self):
        """Only finite numbers are stored."""
        with pytest.raises(ValueError, match="finite"):
            LinearInterpolationBuilder().add_value(float("nan"))


@pytest.mark.parametrize("builder_class", [NearestRankBuilder, LinearInterpolationBuilder])
def test_reference_builders_reject_nan_percentile(builder_class):
    """A NaN target percentile is a configuration error."""
    with pytest.raises(InvalidConfigurationError, match="must not be NaN"):
        builder_class([10, math.nan])
