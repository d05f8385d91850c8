# File: photopeak_fit/models/peak_model.py

from enum import Enum

import numpy as np

MAX_PEAKS = 2
BACKGROUND_PARAM_COUNT = 2
PEAK_PARAM_COUNT = 3


class PeakShape(Enum):
    GAUSSIAN = "gaussian"
    LORENTZIAN = "lorentzian"

    @classmethod
    def coerce(cls, shape):
        """Accept a PeakShape or its (case-insensitive) string value."""
        if isinstance(shape, cls):
            return shape
        try:
            return cls(str(shape).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown peak shape {shape!r}; expected one of {[s.value for s in cls]}"
            ) from None


def parameter_count(peak_count):
    return PEAK_PARAM_COUNT * peak_count + BACKGROUND_PARAM_COUNT


def background(x, c0, c1):
    """Linear background c0 + c1 * x."""
    return c0 + c1 * x


def gaussian(x, area, mu, sigma):
    """Unit-area Gaussian scaled by the peak area."""
    return area * (1.0 / np.sqrt(2.0 * np.pi * sigma**2)) * np.exp(-0.5 * (x - mu)**2 / sigma**2)


def lorentzian(x, area, mu, gamma):
    """Unit-area Lorentzian (gamma = FWHM) scaled by the peak area."""
    return area / np.pi * 0.5 * gamma / ((x - mu)**2 + (0.5 * gamma)**2)


PEAK_FUNCTIONS = {
    PeakShape.GAUSSIAN: gaussian,
    PeakShape.LORENTZIAN: lorentzian,
}


def build_model(shape, peak_count=1):
    """
    Returns f(energy, params) for `peak_count` peaks of the given shape on a
    linear background.
    Parameters: [c0, c1, area1, mu1, width1, area2, mu2, width2]
    """
    shape = PeakShape.coerce(shape)
    if peak_count not in range(1, MAX_PEAKS + 1):
        raise ValueError(f"peak_count must be between 1 and {MAX_PEAKS}, got {peak_count}")
    peak = PEAK_FUNCTIONS[shape]

    if peak_count == 1:
        def model(e, p):
            e = np.asarray(e, dtype=float)
            return background(e, p[0], p[1]) + peak(e, p[2], p[3], p[4])
    else:
        def model(e, p):
            e = np.asarray(e, dtype=float)
            return (background(e, p[0], p[1])
                    + peak(e, p[2], p[3], p[4])
                    + peak(e, p[5], p[6], p[7]))

    model.shape = shape
    model.peak_count = peak_count
    model.__name__ = f"{shape.value}_{peak_count}peak_model"
    return model


def peak_components(shape, peak_count, energy, params):
    """
    Evaluate the background and each peak term separately.

    Returns: (background_curve, [peak_curve_1, ...])
    """
    shape = PeakShape.coerce(shape)
    peak = PEAK_FUNCTIONS[shape]
    e = np.asarray(energy, dtype=float)
    p = np.asarray(params, dtype=float)
    bg = background(e, p[0], p[1]) * np.ones_like(e)
    peaks = []
    for i in range(peak_count):
        start = BACKGROUND_PARAM_COUNT + i * PEAK_PARAM_COUNT
        peaks.append(peak(e, *p[start:start + PEAK_PARAM_COUNT]))
    return bg, peaks
