"""Marker tracked by the P² estimators."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Marker:
    """A (position, value) pair approximating one percentile.

    Markers are created once, when the warm-up buffer is converted, and are
    then updated in place for the rest of the estimator's life.

    Attributes:
        position: Virtual 1-based rank of the marker in the sorted stream.
        value: Current height of the marker.
        percentile: Target percentile, or None for the two extreme markers
            (they only track the observed minimum and maximum).
    """

    position: int
    value: float
    percentile: float | None = None

    def increment_position(self) -> None:
        self.position += 1
