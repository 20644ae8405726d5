"""Nearest-rank percentiles over the full data set.

The p-th percentile is the smallest stored value such that at least p% of
the data is less than or equal to it: ``sorted[ceil(p / 100 * n) - 1]``.

Reference:
    https://en.wikipedia.org/wiki/Percentile#The_nearest-rank_method
"""

from __future__ import annotations

import math
from decimal import Decimal

import numpy as np

from livepercentiles.reference.stored import StoredValuesBuilder


class NearestRankBuilder(StoredValuesBuilder):
    """Exact nearest-rank builder.

    Args:
        percentiles: Percentiles to report (default 10, 20, ..., 90).

    Example:
        builder = NearestRankBuilder([30, 40, 50, 100])
        for v in [15, 20, 35, 40, 50]:
            builder.add_value(v)
        builder.get_percentiles()  # 20, 20, 35, 50
    """

    def _percentile_of(self, ordered: np.ndarray, percentile: float) -> float:
        if percentile < 0:
            return float(ordered[0])
        if percentile >= 100:
            return float(ordered[-1])

        # decimal arithmetic keeps 70% of 10 at exactly 7
        rank = math.ceil(Decimal(str(percentile)) / 100 * len(ordered))
        return float(ordered[max(rank - 1, 0)])
