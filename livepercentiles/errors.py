"""Exceptions raised by the percentile estimators."""


class LivePercentilesError(Exception):
    """Base class for every error raised by livepercentiles."""


class InvalidConfigurationError(LivePercentilesError, ValueError):
    """An estimator was constructed with parameters it cannot work with.

    Raised from ``__init__`` only. The instance is unusable and is never
    repaired internally.
    """


class InvalidStateError(LivePercentilesError, RuntimeError):
    """Marker bookkeeping no longer matches the number of observations.

    Raised while processing a value. Continuing would silently produce wrong
    estimates, so the error is always propagated to the caller.
    """
