"""Base protocol shared by every percentile builder.

A builder consumes a stream of numbers one at a time and, on request,
reports estimates for a fixed set of percentiles. Streaming builders keep a
bounded amount of state; reference builders store everything and are only
meant to check the streaming ones.

This module defines:
- Percentile: the immutable (rank, value) pair every builder returns
- PercentileBuilder: the two-operation contract (add_value, get_percentiles)
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from livepercentiles.errors import InvalidConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class Percentile:
    """An estimated percentile.

    Attributes:
        rank: The requested percentile. Not restricted to [0, 100]; ranks
            below 0 resolve to the minimum and ranks of 100 or more to the
            maximum.
        value: The estimated value at that rank.
    """

    rank: float
    value: float

    def __str__(self) -> str:
        return f"[{self.rank}] {self.value}"


class PercentileBuilder(ABC):
    """Contract implemented by every percentile estimator.

    Builders are single-writer objects: ``add_value`` must not run
    concurrently with itself or with ``get_percentiles`` on the same
    instance. Callers that share a builder between threads serialize access
    themselves.
    """

    @abstractmethod
    def add_value(self, value: float) -> None:
        """Record one observation.

        Args:
            value: A finite number.

        Raises:
            ValueError: If value is NaN or infinite.
        """

    @abstractmethod
    def get_percentiles(self) -> list[Percentile]:
        """Return the current estimates in configured order.

        The list is built fresh on every call and does not change when more
        values are added afterwards. Calling twice with no ``add_value`` in
        between returns equal lists. Returns an empty list when the builder
        has not seen enough data yet.
        """

    @property
    @abstractmethod
    def item_count(self) -> int:
        """Number of observations recorded so far."""


def check_finite(value: float) -> float:
    """Validate and normalize an incoming observation."""
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"value must be a finite number, got {value}")
    return value


def check_percentiles(percentiles: Iterable[float]) -> tuple[float, ...]:
    """Validate the configured target percentiles.

    Infinite ranks are allowed and resolve like any rank outside [0, 100].

    Raises:
        InvalidConfigurationError: If a percentile is NaN.
    """
    percentiles = tuple(percentiles)
    for percentile in percentiles:
        if math.isnan(percentile):
            raise InvalidConfigurationError(f"Percentiles must not be NaN, got {percentiles}")
    return percentiles
