from .photopeak_fit import FitResult, fit, gaussian_fit, lorentz_fit, summarize_fit
from .fit_engine import SolverResult, levenberg_marquardt, numerical_jacobian
from .covariance import covariance_matrix, standard_errors
from .validation import validate_request
from .window import load_histogram, select_window

__all__ = [
    "FitResult", "fit", "gaussian_fit", "lorentz_fit", "summarize_fit",
    "SolverResult", "levenberg_marquardt", "numerical_jacobian",
    "covariance_matrix", "standard_errors",
    "validate_request",
    "load_histogram", "select_window",
]
