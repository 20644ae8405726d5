"""Construction defaults shared by the percentile builders.

The values are immutable: a builder copies what it needs at construction
time and nothing here is ever modified at runtime.
"""

from __future__ import annotations

from enum import Enum


class Precision(Enum):
    """Marker density of the single-percentile P² estimator.

    Each level maps to the number of intermediate markers placed around the
    target percentile. More markers give a better estimate at the cost of a
    slower update.
    """

    LESS_PRECISE_AND_FASTER = 2
    NORMAL = 4
    MORE_PRECISE_AND_SLOWER = 6

    @property
    def intermediate_markers(self) -> int:
        """Number of markers between the two extreme ones."""
        return self.value


DEFAULT_PERCENTILES: tuple[float, ...] = (10, 20, 30, 40, 50, 60, 70, 80, 90)
DEFAULT_BUCKET_COUNT = 10
DEFAULT_PRECISION = Precision.NORMAL
