"""Tools for comparing percentile builders against each other."""

from livepercentiles.analysis.comparison import (
    compare,
    feed,
    mean_squared_errors,
    plot_comparison,
)

__all__ = [
    "compare",
    "feed",
    "mean_squared_errors",
    "plot_comparison",
]
