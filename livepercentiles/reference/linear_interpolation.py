"""Linear interpolation between closest ranks over the full data set.

The i-th sorted value (0-based) is given the percent rank
``100 / n * (i + 0.5)``. A requested percentile is interpolated between the
two values whose percent ranks surround it; outside the first and last
percent ranks the minimum or maximum is reported.

Reference:
    https://en.wikipedia.org/wiki/Percentile#First_variant
"""

from __future__ import annotations

import numpy as np

from livepercentiles.reference.stored import StoredValuesBuilder


class LinearInterpolationBuilder(StoredValuesBuilder):
    """Exact linear-interpolation builder.

    Args:
        percentiles: Percentiles to report (default 10, 20, ..., 90).
    """

    def _percentile_of(self, ordered: np.ndarray, percentile: float) -> float:
        count = len(ordered)
        percent_ranks = 100.0 / count * (np.arange(count) + 0.5)

        if percentile < percent_ranks[0]:
            return float(ordered[0])
        if percentile > percent_ranks[-1]:
            return float(ordered[-1])

        under = int(np.searchsorted(percent_ranks, percentile, side="right")) - 1
        if percent_ranks[under] == percentile:
            return float(ordered[under])

        lower_rank = float(percent_ranks[under])
        lower, upper = float(ordered[under]), float(ordered[under + 1])
        return lower + count * ((percentile - lower_rank) / 100) * (upper - lower)
