"""CKMS rank-bounded sketch for percentile estimation.

Keeps the observed values in an ordered list of buckets. Each bucket
records how many observations it stands for (``g``) and how uncertain its
true rank is (``delta``). A query walks the buckets, accumulating ranks,
until the uncertainty of the next bucket would exceed the allowed error.

This is the basic constant-error flavour: the allowable spread is
``f(rank, n) = 2 * epsilon * n`` for every rank. The buckets are never
merged, so the sketch grows with the number of distinct insertion points.

Key properties:
- Space: O(buckets), uncapped
- Update: O(buckets) (linear scan)
- Query: O(buckets) per requested percentile

Reference:
    Cormode, Korn, Muthukrishnan, Srivastava. "Effective Computation of
    Biased Quantiles over Data Streams" (ICDE 2005)
"""

from __future__ import annotations

import logging
import math
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING

from livepercentiles.config import DEFAULT_PERCENTILES
from livepercentiles.errors import InvalidConfigurationError
from livepercentiles.sketching.base import (
    Percentile,
    PercentileBuilder,
    check_finite,
    check_percentiles,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Bucket:
    """One entry of the CKMS summary.

    Attributes:
        value: The observed value this bucket was created for.
        g: Local rank width (observations represented by this bucket).
        delta: Upper bound on the uncertainty of the bucket's true rank.
    """

    value: float
    g: int
    delta: int


class CKMSSketch(PercentileBuilder):
    """Constant-error CKMS sketch.

    Args:
        epsilon: Relative rank error allowed. Required, must be > 0. Very
            small values make the sketch behave like an exact ranking.
        percentiles: Percentiles reported by get_percentiles (default
            10, 20, ..., 90).

    Raises:
        InvalidConfigurationError: If epsilon <= 0 or a percentile is NaN.

    Example:
        sketch = CKMSSketch(epsilon=0.001, percentiles=[50, 99, 99.9])
        for latency in latencies:
            sketch.add_value(latency)
        sketch.get_percentiles()
    """

    def __init__(self, epsilon: float, percentiles: Iterable[float] = DEFAULT_PERCENTILES):
        if not epsilon > 0:
            raise InvalidConfigurationError(f"epsilon must be positive, got {epsilon}")

        self._epsilon = epsilon
        self._percentiles = check_percentiles(percentiles)
        self._buckets: list[Bucket] = []
        self._count = 0

        logger.debug(
            "CKMSSketch created: epsilon=%g percentiles=%s", epsilon, self._percentiles
        )

    @property
    def epsilon(self) -> float:
        return self._epsilon

    @property
    def desired_percentiles(self) -> tuple[float, ...]:
        return self._percentiles

    @property
    def buckets(self) -> tuple[Bucket, ...]:
        """The current summary, ordered by value."""
        return tuple(self._buckets)

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    @property
    def item_count(self) -> int:
        return self._count

    @property
    def memory_bytes(self) -> int:
        """Estimated memory usage in bytes."""
        # value (8) + g (8) + delta (8) per bucket
        return len(self._buckets) * 24 + sys.getsizeof(self)

    def _allowable_spread(self, rank: float, total: int) -> float:
        """f(rank, n): maximum spread of a bucket. Constant in the rank."""
        return 2 * self._epsilon * total

    def add_value(self, value: float) -> None:
        value = check_finite(value)
        buckets = self._buckets

        if not buckets or value > buckets[-1].value:
            buckets.append(Bucket(value, 1, 0))
        elif value < buckets[0].value:
            buckets.insert(0, Bucket(value, 1, 0))
        else:
            # a value equal to the maximum lands after it
            index = next(
                (i for i, bucket in enumerate(buckets) if value < bucket.value), len(buckets)
            )
            rank_lower_bound = sum(bucket.g for bucket in buckets[:index])
            delta = math.floor(self._allowable_spread(rank_lower_bound, self._count + 1))
            buckets.insert(index, Bucket(value, 1, delta))

        self._count += 1

    def get_percentiles(self) -> list[Percentile]:
        if not self._buckets:
            return []

        results: list[Percentile] = []
        for percentile in self._percentiles:
            value = self._query(percentile)
            if value is not None:
                results.append(Percentile(percentile, value))
        return results

    def _query(self, percentile: float) -> float | None:
        if percentile < 0:
            return self._buckets[0].value
        if percentile >= 100:
            return self._buckets[-1].value

        target_rank = int(percentile / 100 * self._count)
        threshold = target_rank + self._allowable_spread(target_rank, self._count) / 2

        previous: Bucket | None = None
        rank = 0
        for bucket in self._buckets:
            if previous is not None:
                rank += previous.g

            if rank + bucket.g + bucket.delta > threshold:
                # single-bucket sketches and the first bucket report themselves
                return (previous if previous is not None else bucket).value

            previous = bucket

        logger.debug("No bucket satisfies percentile %s within epsilon=%g", percentile, self._epsilon)
        return None

    def __repr__(self) -> str:
        return (
            f"CKMSSketch(epsilon={self._epsilon}, buckets={len(self._buckets)}, "
            f"total={self._count})"
        )
