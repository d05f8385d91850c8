"""Gamma photopeak fitting: Gaussian or Lorentzian peaks on a linear background."""

from .analysis import (
    FitResult, fit, gaussian_fit, lorentz_fit, summarize_fit,
    levenberg_marquardt, covariance_matrix, standard_errors,
    validate_request, load_histogram, select_window,
)
from .config import SolverOptions
from .errors import (
    PhotopeakFitError, ShapeError, BoundsMismatchError, UnsupportedPeakCountError,
    BoundsInfeasibleError, SolverError, InsufficientDataError, SingularCovarianceError,
)
from .models import PeakShape, build_model, peak_components
from .synthetic import synthetic_histogram

__version__ = "0.1.0"

__all__ = [
    # Fitting
    "FitResult", "fit", "gaussian_fit", "lorentz_fit", "summarize_fit",
    "levenberg_marquardt", "covariance_matrix", "standard_errors",
    "validate_request", "load_histogram", "select_window",
    "SolverOptions",
    # Models
    "PeakShape", "build_model", "peak_components", "synthetic_histogram",
    # Errors
    "PhotopeakFitError", "ShapeError", "BoundsMismatchError", "UnsupportedPeakCountError",
    "BoundsInfeasibleError", "SolverError", "InsufficientDataError", "SingularCovarianceError",
]
