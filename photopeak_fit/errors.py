# File: photopeak_fit/errors.py
"""Exceptions raised by the photopeak fitting routines.

Validation failures derive from ValueError and numerical failures from
RuntimeError, matching what scipy's curve_fit raises for the same situations.
"""


class PhotopeakFitError(Exception):
    """Base class for every error raised by photopeak_fit."""


class ShapeError(PhotopeakFitError, ValueError):
    """Parameter (or bound) vector has the wrong length for the peak count."""

    def __init__(self, length, peak_count, what="parameters"):
        self.length = length
        self.peak_count = peak_count
        self.required = 3 * peak_count + 2
        super().__init__(
            f"{what} has length {length}; must have [3*number of photopeaks + 2] = "
            f"{self.required} entries for {peak_count} peak(s)"
        )


class BoundsMismatchError(PhotopeakFitError, ValueError):
    """Only one of lower/upper bounds was supplied."""


class UnsupportedPeakCountError(PhotopeakFitError, ValueError):
    """Peak count outside the supported range (1 or 2)."""


class BoundsInfeasibleError(PhotopeakFitError, ValueError):
    """A lower bound is greater than its upper bound."""


class SolverError(PhotopeakFitError, RuntimeError):
    """The least-squares solver could not produce a result."""


class InsufficientDataError(SolverError):
    """Not enough data points for the number of fit parameters."""


class SingularCovarianceError(PhotopeakFitError, RuntimeError):
    """The Jacobian is rank deficient so the covariance cannot be estimated."""
