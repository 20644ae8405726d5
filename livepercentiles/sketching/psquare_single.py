"""P² estimator for a single percentile.

Places the central marker on the requested percentile and spreads the
remaining intermediate markers evenly below and above it. The precision
level controls how many intermediate markers are used:

    LESS_PRECISE_AND_FASTER  2 markers (5 in total)
    NORMAL                   4 markers (7 in total)
    MORE_PRECISE_AND_SLOWER  6 markers (9 in total)

This is the variant to use when only one tail percentile matters (p99 of
request latency, for instance). CombinedPsquareSinglePercentile runs one
estimator per requested percentile to cover several of them.

Reference:
    Jain, Chlamtac. "The P² Algorithm for Dynamic Calculation of Quantiles
    and Histograms Without Storing Observations" (1985), section 3
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from livepercentiles.config import DEFAULT_PERCENTILES, DEFAULT_PRECISION, Precision
from livepercentiles.errors import InvalidConfigurationError
from livepercentiles.sketching.base import Percentile, PercentileBuilder, check_finite
from livepercentiles.sketching.psquare import MarkerPolicy, PsquareEngine

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from livepercentiles.sketching.marker import Marker

logger = logging.getLogger(__name__)


def _resolve_precision(precision: Precision | str) -> Precision:
    if isinstance(precision, Precision):
        return precision
    if isinstance(precision, str) and precision.upper() in Precision.__members__:
        return Precision[precision.upper()]
    raise InvalidConfigurationError(f"Unknown precision: {precision!r}")


class _SinglePercentilePolicy(MarkerPolicy):
    def __init__(self, percentile: float, intermediate_markers: int):
        self._percentile = percentile
        self._intermediate_markers = intermediate_markers
        self._half_bucket_count = (intermediate_markers + 2) // 2
        self.central_index = (intermediate_markers + 3) // 2

    @property
    def warmup_threshold(self) -> int:
        return self._intermediate_markers + 3

    def initial_percentile(self, index: int) -> float:
        p = self._percentile
        if index < self.central_index:
            return p / self._half_bucket_count * index
        if index > self.central_index:
            return p + ((100.0 - p) / self._half_bucket_count * (index - self.central_index))
        return p

    def desired_position(self, index: int, marker: Marker, observations: int) -> float:
        return 1 + (observations - 1) * marker.percentile / 100

    def select(self, markers: Sequence[Marker]) -> Sequence[Marker]:
        return markers[self.central_index : self.central_index + 1]


class PsquareSinglePercentile(PercentileBuilder):
    """Streaming estimator of one percentile.

    Args:
        percentile: Target percentile. Must not be negative; 100 or more
            reports the observed maximum.
        precision: Marker density (default Precision.NORMAL). Accepts a
            Precision member or its name.

    Raises:
        InvalidConfigurationError: If percentile is negative or NaN, or
            precision is unknown.

    Example:
        p99 = PsquareSinglePercentile(99, precision=Precision.MORE_PRECISE_AND_SLOWER)
        for latency in latencies:
            p99.add_value(latency)
        p99.get_percentiles()  # [Percentile(rank=99, value=...)]
    """

    def __init__(self, percentile: float, precision: Precision | str = DEFAULT_PRECISION):
        if math.isnan(percentile):
            raise InvalidConfigurationError("Percentile must not be NaN")
        if percentile < 0:
            raise InvalidConfigurationError(
                f"Only positive percentiles are allowed, got {percentile}"
            )

        self._percentile = percentile
        self._precision = _resolve_precision(precision)
        self._policy = _SinglePercentilePolicy(percentile, self._precision.intermediate_markers)
        self._engine = PsquareEngine(self._policy)

        logger.debug(
            "PsquareSinglePercentile created: percentile=%s precision=%s",
            percentile,
            self._precision.name,
        )

    @property
    def percentile(self) -> float:
        return self._percentile

    @property
    def precision(self) -> Precision:
        return self._precision

    @property
    def marker_count(self) -> int:
        return self._engine.marker_count

    @property
    def item_count(self) -> int:
        return self._engine.observations

    @property
    def memory_bytes(self) -> int:
        return self._engine.memory_bytes

    def add_value(self, value: float) -> None:
        self._engine.add_value(check_finite(value))

    def get_percentiles(self) -> list[Percentile]:
        if self._engine.is_initialized and self._percentile >= 100:
            return [Percentile(self._percentile, self._engine.maximum)]
        return self._engine.percentiles()

    def __repr__(self) -> str:
        return (
            f"PsquareSinglePercentile(percentile={self._percentile}, "
            f"precision={self._precision.name}, total={self.item_count})"
        )


class CombinedPsquareSinglePercentile(PercentileBuilder):
    """Several single-percentile estimators fed from the same stream.

    Gives the single-percentile algorithm the multi-percentile contract of
    the other builders. Results are concatenated in the order the
    percentiles were given; nothing is reported until every inner
    estimator has warmed up (they all share the same threshold).

    Args:
        percentiles: Target percentiles (default 10, 20, ..., 90).
        precision: Marker density applied to every inner estimator.
    """

    def __init__(
        self,
        percentiles: Iterable[float] = DEFAULT_PERCENTILES,
        precision: Precision | str = DEFAULT_PRECISION,
    ):
        self._builders = [PsquareSinglePercentile(p, precision) for p in percentiles]
        self._count = 0

    @property
    def item_count(self) -> int:
        return self._count

    @property
    def memory_bytes(self) -> int:
        return sum(b.memory_bytes for b in self._builders)

    def add_value(self, value: float) -> None:
        value = check_finite(value)
        for builder in self._builders:
            builder.add_value(value)
        self._count += 1

    def get_percentiles(self) -> list[Percentile]:
        results: list[Percentile] = []
        for builder in self._builders:
            results.extend(builder.get_percentiles())
        return results
