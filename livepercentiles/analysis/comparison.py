"""Side-by-side comparison of percentile builders on one stream.

Feeds the same values to several builders and lines up their estimates in
a pandas DataFrame (one row per rank, one column per builder) so streaming
estimators can be checked against an exact reference.

Example:
    builders = {
        "nearest rank": NearestRankBuilder(PERCENTILES),
        "P² single (fast)": CombinedPsquareSinglePercentile(PERCENTILES, "less_precise_and_faster"),
        "CKMS": CKMSSketch(epsilon=0.0001, percentiles=PERCENTILES),
    }
    feed(builders.values(), latencies)
    frame = compare(builders)
    errors = mean_squared_errors(frame, reference="nearest rank")
    plot_comparison(frame, "comparison.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from livepercentiles.sketching.base import PercentileBuilder

logger = logging.getLogger(__name__)

RANK_COLUMN = "rank"


def feed(builders: Iterable[PercentileBuilder], values: Iterable[float]) -> int:
    """Add every value to every builder.

    Returns:
        Number of values fed.
    """
    builders = list(builders)
    count = 0
    for value in values:
        for builder in builders:
            builder.add_value(value)
        count += 1
    logger.debug("Fed %d values to %d builders", count, len(builders))
    return count


def compare(builders: Mapping[str, PercentileBuilder]) -> pd.DataFrame:
    """Collect the current estimates of each builder.

    Args:
        builders: Builder per column name.

    Returns:
        DataFrame indexed by rank. A builder that did not report a rank
        (not warmed up yet, or CKMS without a matching bucket) leaves NaN.
    """
    columns = {
        name: pd.Series({p.rank: p.value for p in builder.get_percentiles()}, dtype="float64")
        for name, builder in builders.items()
    }
    frame = pd.DataFrame(columns)
    frame.index.name = RANK_COLUMN
    return frame.sort_index()


def mean_squared_errors(frame: pd.DataFrame, reference: str) -> pd.Series:
    """Mean squared error of every column against the ``reference`` column.

    A column with any missing rank gets NaN rather than an error averaged
    over the ranks it did report.

    Raises:
        KeyError: If reference is not a column of frame.
    """
    if reference not in frame.columns:
        raise KeyError(f"Unknown reference column {reference!r}")

    squared = frame.sub(frame[reference], axis=0) ** 2
    return squared.mean(axis=0, skipna=False)


def plot_comparison(frame: pd.DataFrame, path: str | Path, title: str = "Percentile estimates") -> Path:
    """Plot every builder's estimates against rank and save the figure.

    Draws on a standalone Figure, so the caller's pyplot state and
    matplotlib backend are left untouched.
    """
    from matplotlib.figure import Figure

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig = Figure(figsize=(10, 6))
    ax = fig.subplots()
    for name in frame.columns:
        ax.plot(frame.index, frame[name], marker="o", label=name)
    ax.set_xlabel("Percentile")
    ax.set_ylabel("Value")
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(path, dpi=150)

    logger.info("Saved percentile comparison plot to %s", path)
    return path
