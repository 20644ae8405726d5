"""Streaming percentile estimators.

Every estimator processes a stream one value at a time, keeps a bounded
(P²) or compact (CKMS) summary, and reports percentiles on demand through
the PercentileBuilder contract.

Quick Reference:
    PsquareHistogram: k-1 evenly spaced percentiles with k+1 markers
    PsquareSinglePercentile: one percentile, precision-tunable marker count
    CombinedPsquareSinglePercentile: one P² single estimator per percentile
    CKMSSketch: arbitrary percentiles with a constant rank error bound

Example:
    from livepercentiles.sketching import CKMSSketch, PsquareHistogram

    histogram = PsquareHistogram(bucket_count=10)
    sketch = CKMSSketch(epsilon=0.001, percentiles=[50, 95, 99])
    for latency in latencies:
        histogram.add_value(latency)
        sketch.add_value(latency)

    print(histogram.get_percentiles())
    print(sketch.get_percentiles())
"""

from livepercentiles.sketching.base import Percentile, PercentileBuilder
from livepercentiles.sketching.ckms import Bucket, CKMSSketch
from livepercentiles.sketching.marker import Marker
from livepercentiles.sketching.psquare import (
    MarkerPolicy,
    PsquareEngine,
    compute_linear_value,
    compute_psquare_value,
)
from livepercentiles.sketching.psquare_histogram import PsquareHistogram
from livepercentiles.sketching.psquare_single import (
    CombinedPsquareSinglePercentile,
    PsquareSinglePercentile,
)

__all__ = [
    "Bucket",
    "CKMSSketch",
    "CombinedPsquareSinglePercentile",
    "Marker",
    "MarkerPolicy",
    "Percentile",
    "PercentileBuilder",
    "PsquareEngine",
    "PsquareHistogram",
    "PsquareSinglePercentile",
    "compute_linear_value",
    "compute_psquare_value",
]
