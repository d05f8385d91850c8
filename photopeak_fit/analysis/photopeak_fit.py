# File: photopeak_fit/analysis/photopeak_fit.py
import logging
import warnings
from collections import namedtuple

import numpy as np

from photopeak_fit.analysis.covariance import standard_errors
from photopeak_fit.analysis.fit_engine import levenberg_marquardt
from photopeak_fit.analysis.validation import validate_request
from photopeak_fit.analysis.window import select_window
from photopeak_fit.config import BOUND_PROXIMITY_EPS, SolverOptions
from photopeak_fit.models.peak_model import PeakShape, build_model

logger = logging.getLogger(__name__)

FitResult = namedtuple("FitResult", ["params", "std_errors", "model"])


def _check_bound_proximity(params, lower_bounds, upper_bounds, verbose):
    # Post-fit: flag parameters sitting on a bound (possible clipping)
    lb = np.asarray(lower_bounds, dtype=float)
    ub = np.asarray(upper_bounds, dtype=float)
    close_to_lb = np.isclose(params, lb, atol=BOUND_PROXIMITY_EPS, rtol=0)
    close_to_ub = np.isclose(params, ub, atol=BOUND_PROXIMITY_EPS, rtol=0)
    if close_to_lb.any() or close_to_ub.any():
        msg = (f"Some optimized parameters are very close to their bounds. "
               f"close_to_lb={np.nonzero(close_to_lb)[0].tolist()}, "
               f"close_to_ub={np.nonzero(close_to_ub)[0].tolist()}")
        logger.warning(msg)
        if verbose:
            warnings.warn(msg)


def fit(shape, data, xlow, xhigh, initial_params, peak_count=1,
        lower_bounds=None, upper_bounds=None, options=None):
    """
    Photopeak fit of a histogram with `peak_count` peaks of the given shape on
    a linear background.

    Args:
        shape: PeakShape (or "gaussian" / "lorentzian").
        data: histogram in the [energy, counts] format.
        xlow, xhigh: exclusive energy cuts for the fit.
        initial_params: [bg_const, bg_slope, area1, centroid1, width1, ...],
            length 3*peak_count + 2.
        peak_count: number of peaks to fit (1 or 2, default 1).
        lower_bounds, upper_bounds: optional parameter bounds, same format as
            initial_params. Both or neither must be given.
        options: SolverOptions for the Levenberg-Marquardt solver.

    Returns: FitResult(params, std_errors, model) where model(e, params)
        evaluates the fitted function.
    """
    peak_count = validate_request(initial_params, peak_count, lower_bounds, upper_bounds)
    if options is None:
        options = SolverOptions()

    model = build_model(shape, peak_count)
    if xlow >= xhigh:
        logger.warning("Empty fit window: xlow=%g is not below xhigh=%g", xlow, xhigh)
    x, y = select_window(data, xlow, xhigh)

    solution = levenberg_marquardt(model, x, y, initial_params,
                                   lower_bounds, upper_bounds, options=options)
    errors = standard_errors(solution.jacobian, solution.residuals, rcond=options.rcond)

    if lower_bounds is not None:
        _check_bound_proximity(solution.params, lower_bounds, upper_bounds, options.verbose)

    logger.info("%s fit with %d peak(s) on %d points converged in %d iterations (ssr=%.6g)",
                model.shape.value, peak_count, x.size, solution.iterations, solution.ssr)
    return FitResult(solution.params, errors, model)


def gaussian_fit(data, xlow, xhigh, initial_params, peak_count=1,
                 lower_bounds=None, upper_bounds=None, options=None):
    """
    Gamma photopeak fit using Gaussian peaks on a linear background.

    Example: fit a gamma line at 988 keV
        p, s, f = gaussian_fit(data, 980, 1000, [600, 0.05, 1000, 988, 0.8])
    The width parameter is the Gaussian sigma.
    """
    return fit(PeakShape.GAUSSIAN, data, xlow, xhigh, initial_params, peak_count,
               lower_bounds, upper_bounds, options)


def lorentz_fit(data, xlow, xhigh, initial_params, peak_count=1,
                lower_bounds=None, upper_bounds=None, options=None):
    """
    Gamma photopeak fit using Lorentzian peaks on a linear background.
    The width parameter is the Lorentzian FWHM.
    """
    return fit(PeakShape.LORENTZIAN, data, xlow, xhigh, initial_params, peak_count,
               lower_bounds, upper_bounds, options)


def summarize_fit(data, xlow, xhigh, result):
    """
    Formats a FitResult into background/peak values with errors and
    goodness-of-fit figures over the same window.
    """
    params, perr, model = result
    x, y = select_window(data, xlow, xhigh)
    y_fit = model(x, params)
    residuals = y - y_fit

    # Chi-Squared with Poisson variances (counts, floored at 1)
    ssr = float(np.sum(residuals**2))
    chi_squared = float(np.sum(residuals**2 / np.where(y > 0, y, 1)))
    n_params = len(params)
    dof = len(x) - n_params
    reduced_chi_squared = chi_squared / dof if dof > 0 else np.nan
    ss_tot = float(np.sum((y - np.mean(y))**2)) if len(y) else 0.0
    r_squared = 1.0 - ssr / ss_tot if ss_tot > 0 else np.nan

    peak_results = []
    for i in range((n_params - 2) // 3):
        start = 2 + i * 3
        peak_results.append({
            'area': params[start], 'area_err': perr[start],
            'centroid': params[start + 1], 'centroid_err': perr[start + 1],
            'width': params[start + 2], 'width_err': perr[start + 2],
        })

    return {
        'shape': model.shape.value,
        'background': {
            'opt': {'c0': params[0], 'c1': params[1]},
            'err': {'c0': perr[0], 'c1': perr[1]},
        },
        'peaks': peak_results,
        'goodness_of_fit': {
            'ssr': ssr,
            'chi_squared': chi_squared,
            'reduced_chi_squared': reduced_chi_squared,
            'dof': dof,
            'r_squared': r_squared,
        },
    }
