"""Exact percentile builders used as oracles for the streaming estimators.

They store every value, so they must not be used on unbounded streams.
"""

from livepercentiles.reference.linear_interpolation import LinearInterpolationBuilder
from livepercentiles.reference.nearest_rank import NearestRankBuilder
from livepercentiles.reference.stored import StoredValuesBuilder

__all__ = [
    "LinearInterpolationBuilder",
    "NearestRankBuilder",
    "StoredValuesBuilder",
]
