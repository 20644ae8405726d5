"""livepercentiles: percentile estimation over unbounded streams.

Streaming estimators keep memory independent of the stream length:

    PsquareHistogram          P² histogram, k-1 evenly spaced percentiles
    PsquareSinglePercentile   P² for one percentile
    CKMSSketch                rank-bounded bucket sketch

Exact reference builders (NearestRankBuilder, LinearInterpolationBuilder)
store everything and serve as test oracles.

The library is silent by default; see livepercentiles.logging_config.
"""

import logging

from livepercentiles.config import (
    DEFAULT_BUCKET_COUNT,
    DEFAULT_PERCENTILES,
    DEFAULT_PRECISION,
    Precision,
)
from livepercentiles.errors import (
    InvalidConfigurationError,
    InvalidStateError,
    LivePercentilesError,
)
from livepercentiles.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
    set_level,
    set_module_level,
)
from livepercentiles.reference import LinearInterpolationBuilder, NearestRankBuilder
from livepercentiles.sketching import (
    Bucket,
    CKMSSketch,
    CombinedPsquareSinglePercentile,
    Percentile,
    PercentileBuilder,
    PsquareHistogram,
    PsquareSinglePercentile,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "Bucket",
    "CKMSSketch",
    "CombinedPsquareSinglePercentile",
    "DEFAULT_BUCKET_COUNT",
    "DEFAULT_PERCENTILES",
    "DEFAULT_PRECISION",
    "InvalidConfigurationError",
    "InvalidStateError",
    "LinearInterpolationBuilder",
    "LivePercentilesError",
    "NearestRankBuilder",
    "Percentile",
    "PercentileBuilder",
    "Precision",
    "PsquareHistogram",
    "PsquareSinglePercentile",
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]
