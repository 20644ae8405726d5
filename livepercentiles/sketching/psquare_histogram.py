"""P² histogram estimator for evenly spaced percentiles.

Given ``bucket_count`` k, tracks the k-1 percentiles that cut the data into
k equally populated buckets: 25/50/75 for k=4, 10..90 for k=10.

Key properties:
- Space: k+1 markers
- Update: O(k)
- Warm-up: k+1 observations before the first estimate

Reference:
    Jain, Chlamtac. "The P² Algorithm for Dynamic Calculation of Quantiles
    and Histograms Without Storing Observations" (1985), section 4
"""

from __future__ import annotations

import logging

from livepercentiles.config import DEFAULT_BUCKET_COUNT
from livepercentiles.errors import InvalidConfigurationError
from livepercentiles.sketching.base import Percentile, PercentileBuilder, check_finite
from livepercentiles.sketching.marker import Marker
from livepercentiles.sketching.psquare import MarkerPolicy, PsquareEngine

logger = logging.getLogger(__name__)

MIN_BUCKET_COUNT = 4


class _HistogramPolicy(MarkerPolicy):
    def __init__(self, bucket_count: int):
        self._bucket_count = bucket_count

    @property
    def warmup_threshold(self) -> int:
        return self._bucket_count + 1

    def initial_percentile(self, index: int) -> float:
        return 100.0 / self._bucket_count * index

    def desired_position(self, index: int, marker: Marker, observations: int) -> float:
        return 1 + index * (observations - 1.0) / self._bucket_count


class PsquareHistogram(PercentileBuilder):
    """Streaming estimator of k-1 evenly spaced percentiles.

    Args:
        bucket_count: Number of buckets k (default 10). Must be at least 4;
            fewer buckets leave no interior marker worth estimating.

    Raises:
        InvalidConfigurationError: If bucket_count < 4.

    Example:
        histogram = PsquareHistogram(bucket_count=4)
        for latency in latencies:
            histogram.add_value(latency)

        for p in histogram.get_percentiles():
            print(p.rank, p.value)  # 25.0, 50.0, 75.0
    """

    def __init__(self, bucket_count: int = DEFAULT_BUCKET_COUNT):
        if bucket_count < MIN_BUCKET_COUNT:
            raise InvalidConfigurationError(
                f"At least {MIN_BUCKET_COUNT} buckets should be provided to obtain "
                f"meaningful estimates, got {bucket_count}"
            )

        self._bucket_count = bucket_count
        self._engine = PsquareEngine(_HistogramPolicy(bucket_count))

        logger.debug("PsquareHistogram created: bucket_count=%d", bucket_count)

    @property
    def bucket_count(self) -> int:
        return self._bucket_count

    @property
    def desired_percentiles(self) -> tuple[float, ...]:
        """Percentiles reported once warm-up is over."""
        return tuple(100.0 / self._bucket_count * i for i in range(1, self._bucket_count))

    @property
    def marker_count(self) -> int:
        """Markers currently tracked (0 until warm-up completes, then k+1)."""
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
        return self._engine.percentiles()

    def __repr__(self) -> str:
        return f"PsquareHistogram(bucket_count={self._bucket_count}, total={self.item_count})"
