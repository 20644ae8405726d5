"""Shared engine of the P² streaming percentile estimators.

The P² algorithm keeps a handful of markers whose heights approximate
chosen percentiles of everything seen so far. Each new observation shifts
marker positions as if the value had been inserted into the sorted stream,
then nudges the interior markers back towards their desired positions,
adjusting their heights with a piecewise-parabolic (or, failing that,
linear) prediction.

Key properties:
- Space: O(m) for m markers, independent of the stream length
- Update: O(m)
- Query: O(m)

The engine runs two phases:
1. Buffering: raw values are appended until the policy's warm-up threshold
   is reached.
2. Tracking: the sorted buffer becomes the initial markers and is dropped;
   only markers are kept from then on.

Variants differ in how many markers they use, which percentile each marker
targets and where a marker should sit. Those decisions live in a
MarkerPolicy passed to the engine, so one update algorithm serves every
variant.

Reference:
    Jain, Chlamtac. "The P² Algorithm for Dynamic Calculation of Quantiles
    and Histograms Without Storing Observations" (1985)
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from livepercentiles.errors import InvalidStateError
from livepercentiles.sketching.base import Percentile
from livepercentiles.sketching.marker import Marker

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def compute_psquare_value(previous: Marker, current: Marker, following: Marker, shift: int) -> float:
    """Piecewise-parabolic prediction of ``current``'s height after moving by ``shift``.

    Args:
        previous: Marker immediately before ``current``.
        current: Marker being moved.
        following: Marker immediately after ``current``.
        shift: +1 or -1.

    Returns:
        The predicted height. Callers must check that it lies strictly
        between the neighbours' heights before using it.
    """
    ratio = shift / (following.position - previous.position)
    distance_from_previous = current.position - previous.position + shift
    distance_to_following = following.position - current.position - shift
    following_slope = (following.value - current.value) / (following.position - current.position)
    previous_slope = (current.value - previous.value) / (current.position - previous.position)

    return current.value + ratio * (
        distance_from_previous * following_slope + distance_to_following * previous_slope
    )


def compute_linear_value(previous: Marker, current: Marker, following: Marker, shift: int) -> float:
    """Linear prediction of ``current``'s height, towards the neighbour in the shift direction."""
    other = previous if shift < 0 else following
    return current.value + shift * ((other.value - current.value) / (other.position - current.position))


class MarkerPolicy(ABC):
    """Variant-specific decisions plugged into PsquareEngine."""

    @property
    @abstractmethod
    def warmup_threshold(self) -> int:
        """Observations to buffer before markers are created (one marker each)."""

    @abstractmethod
    def initial_percentile(self, index: int) -> float:
        """Target percentile of the interior marker at ``index`` (1-based among all markers)."""

    @abstractmethod
    def desired_position(self, index: int, marker: Marker, observations: int) -> float:
        """Where the interior marker at ``index`` should sit after ``observations`` values."""

    def select(self, markers: Sequence[Marker]) -> Sequence[Marker]:
        """Markers reported by a query. Defaults to every interior marker."""
        return markers[1:-1]


class PsquareEngine:
    """Buffering/tracking state machine shared by the P² estimators.

    Args:
        policy: Supplies the warm-up threshold, marker targets and desired
            positions of one estimator variant.

    Example:
        engine = PsquareEngine(policy)
        for latency in latencies:
            engine.add_value(latency)
        engine.percentiles()
    """

    def __init__(self, policy: MarkerPolicy):
        self._policy = policy
        self._observations = 0
        self._startup_values: list[float] = []
        self._markers: list[Marker] = []

    @property
    def is_initialized(self) -> bool:
        """True once the warm-up buffer has been converted into markers."""
        return bool(self._markers)

    @property
    def observations(self) -> int:
        return self._observations

    @property
    def markers(self) -> tuple[Marker, ...]:
        """Snapshot copies of the current markers, in order."""
        return tuple(Marker(m.position, m.value, m.percentile) for m in self._markers)

    @property
    def marker_count(self) -> int:
        return len(self._markers)

    @property
    def minimum(self) -> float | None:
        """Smallest value seen, tracked by the first marker once initialized."""
        if self._markers:
            return self._markers[0].value
        return min(self._startup_values, default=None)

    @property
    def maximum(self) -> float | None:
        """Largest value seen, tracked by the last marker once initialized."""
        if self._markers:
            return self._markers[-1].value
        return max(self._startup_values, default=None)

    @property
    def memory_bytes(self) -> int:
        """Estimated memory usage in bytes."""
        # position (8) + value (8) + percentile (8) per marker
        return (len(self._markers) * 24) + (len(self._startup_values) * 8) + sys.getsizeof(self)

    def add_value(self, value: float) -> None:
        self._observations += 1

        if not self.is_initialized:
            self._startup_phase(value)
        else:
            self._normal_phase(value)

    def percentiles(self) -> list[Percentile]:
        """Materialize the reported markers as Percentile objects."""
        if not self.is_initialized:
            return []
        return [Percentile(m.percentile, m.value) for m in self._policy.select(self._markers)]

    def _startup_phase(self, value: float) -> None:
        self._startup_values.append(value)
        if self._observations < self._policy.warmup_threshold:
            return

        self._initialize_markers()

    def _initialize_markers(self) -> None:
        ordered = sorted(self._startup_values)
        last = len(ordered) - 1
        self._markers = [
            Marker(
                position=i + 1,
                value=value,
                percentile=None if i in (0, last) else self._policy.initial_percentile(i),
            )
            for i, value in enumerate(ordered)
        ]
        self._startup_values = []

        logger.debug(
            "P² markers initialized after %d observations: %s",
            self._observations,
            [(m.position, m.value, m.percentile) for m in self._markers],
        )

    def _normal_phase(self, value: float) -> None:
        bucket_index = self._find_containing_bucket(value)
        self._increment_positions_from(bucket_index + 1)
        self._recompute_interior_markers()

        if self._observations != self._markers[-1].position:
            logger.error(
                "Marker bookkeeping broken: %d observations but last marker at position %d",
                self._observations,
                self._markers[-1].position,
            )
            raise InvalidStateError(
                f"Observation count {self._observations} does not match "
                f"last marker position {self._markers[-1].position}"
            )

    def _find_containing_bucket(self, value: float) -> int:
        """Index of the marker interval holding ``value``, widening the extremes if needed."""
        markers = self._markers
        if value < markers[0].value:
            markers[0].value = value
            return 0

        if value > markers[-1].value:
            markers[-1].value = value
            return len(markers) - 2

        for i in range(len(markers) - 2):
            if markers[i].value <= value < markers[i + 1].value:
                return i

        # last interval is closed on both ends
        return len(markers) - 2

    def _increment_positions_from(self, first_index: int) -> None:
        for marker in self._markers[first_index:]:
            marker.increment_position()

    def _recompute_interior_markers(self) -> None:
        markers = self._markers
        for i in range(1, len(markers) - 1):
            previous, current, following = markers[i - 1], markers[i], markers[i + 1]

            desired = self._policy.desired_position(i, current, self._observations)
            delta_to_desired = desired - current.position
            delta_to_following = following.position - current.position
            delta_to_previous = previous.position - current.position

            if (delta_to_desired >= 1 and delta_to_following > 1) or (
                delta_to_desired <= -1 and delta_to_previous < -1
            ):
                shift = -1 if delta_to_desired < 0 else 1
                candidate = compute_psquare_value(previous, current, following, shift)
                if previous.value < candidate < following.value:
                    current.value = candidate
                else:
                    current.value = compute_linear_value(previous, current, following, shift)
                current.position += shift
