"""Common storage for the exact reference builders."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING

import numpy as np

from livepercentiles.config import DEFAULT_PERCENTILES
from livepercentiles.sketching.base import (
    Percentile,
    PercentileBuilder,
    check_finite,
    check_percentiles,
)

if TYPE_CHECKING:
    from collections.abc import Iterable


class StoredValuesBuilder(PercentileBuilder):
    """Builder that keeps every value and sorts them on each query.

    Memory grows linearly with the stream. Only meant as an oracle for the
    streaming estimators.
    """

    def __init__(self, percentiles: Iterable[float] = DEFAULT_PERCENTILES):
        self._percentiles = check_percentiles(percentiles)
        self._values: list[float] = []

    @property
    def desired_percentiles(self) -> tuple[float, ...]:
        return self._percentiles

    @property
    def item_count(self) -> int:
        return len(self._values)

    def add_value(self, value: float) -> None:
        self._values.append(check_finite(value))

    def get_percentiles(self) -> list[Percentile]:
        if not self._values:
            return []

        ordered = np.sort(np.asarray(self._values, dtype=np.float64))
        return [Percentile(p, self._percentile_of(ordered, p)) for p in self._percentiles]

    @abstractmethod
    def _percentile_of(self, ordered: np.ndarray, percentile: float) -> float:
        """Exact value of ``percentile`` in the ascending array ``ordered``."""
