# File: photopeak_fit/analysis/validation.py
import numbers

from photopeak_fit.errors import BoundsMismatchError, ShapeError, UnsupportedPeakCountError
from photopeak_fit.models.peak_model import MAX_PEAKS, parameter_count


def validate_request(initial_params, peak_count=1, lower_bounds=None, upper_bounds=None):
    """
    Checks the structural preconditions of a fit request before any numerical
    work. A non-integer peak count is rejected first; otherwise the first
    violated condition is raised, in this order: parameter length,
    lower-bound presence, upper-bound presence, peak count range.

    Returns: the effective peak count (None -> 1).
    """
    if peak_count is None:
        peak_count = 1
    if isinstance(peak_count, bool) or not isinstance(peak_count, numbers.Integral):
        raise UnsupportedPeakCountError(f"number of photopeaks must be an integer, got {peak_count!r}")

    if len(initial_params) != parameter_count(peak_count):
        raise ShapeError(len(initial_params), peak_count)
    if lower_bounds is None and upper_bounds is not None:
        raise BoundsMismatchError("both lower and upper bounds must be defined (lower is missing)")
    if upper_bounds is None and lower_bounds is not None:
        raise BoundsMismatchError("both lower and upper bounds must be defined (upper is missing)")
    if peak_count > MAX_PEAKS:
        raise UnsupportedPeakCountError(f"number of photopeaks must be {MAX_PEAKS} or less, got {peak_count}")
    if peak_count < 1:
        raise UnsupportedPeakCountError(f"number of photopeaks must be at least 1, got {peak_count}")

    if lower_bounds is not None:
        for name, bounds in (("lower_bounds", lower_bounds), ("upper_bounds", upper_bounds)):
            if len(bounds) != len(initial_params):
                raise ShapeError(len(bounds), peak_count, what=name)

    return int(peak_count)
